"""
Deposit commitments and nullifier hashes.

A deposit is represented on chain by a single field element:

    commitment = H(nullifier, secret, token, amount)

where `H` is the sponge `hash_n` of the configured hasher. The nullifier and
secret are uniformly random field elements known only to the depositor. At
withdrawal time the depositor publishes

    nullifier_hash = H(nullifier)

which the contract records to block a second withdrawal of the same note,
without revealing which leaf is being spent.

Both functions are deterministic in their inputs. Randomness enters only
through `generate_deposit`, and only after every input has been validated.
"""

from __future__ import annotations

import logging

from pydantic import Field

from shadow_pool.types import StrictBaseModel

from ..bn254.field import Fr
from ..hasher import POSEIDON2_HASHER, Hasher
from ..pool_config import TARGET_CONFIG, PoolConfig
from .encoding import canonicalize_amount, canonicalize_token
from .rand import PROD_RAND, Rand

logger = logging.getLogger(__name__)


class DepositNote(StrictBaseModel):
    """Everything a depositor must keep to later withdraw."""

    commitment: Fr
    """The leaf appended to the tree."""

    nullifier: Fr
    """Secret whose hash is revealed at withdrawal."""

    secret: Fr
    """Secret blinding factor."""

    token: int = Field(ge=0)
    """Canonical token address as an integer (0 for native ETH)."""

    amount: int = Field(ge=0)
    """Amount in base units."""


class CommitmentScheme:
    """Derives commitments and nullifier hashes with a fixed hasher."""

    def __init__(
        self,
        hasher: Hasher = POSEIDON2_HASHER,
        rand: Rand = PROD_RAND,
        config: PoolConfig = TARGET_CONFIG,
    ):
        self.hasher = hasher
        self.rand = rand
        self.config = config

    def random_field_element(self) -> Fr:
        """
        A uniformly random element of [0, P).

        Raises:
            RandomnessError: If the secure source is unavailable.
        """
        return self.rand.field_element()

    def derive_commitment(self, nullifier: Fr, secret: Fr, token: str, amount: int | str) -> Fr:
        """
        Compute the deposit commitment `H(nullifier, secret, token, amount)`.

        Raises:
            EncodingError: If the token or amount is malformed.
        """
        token_value = canonicalize_token(token, self.config)
        amount_value = canonicalize_amount(amount)
        return self._commit(nullifier, secret, token_value, amount_value)

    def _commit(self, nullifier: Fr, secret: Fr, token: int, amount: int) -> Fr:
        return self.hasher.hash_n([nullifier, secret, Fr(value=token), Fr(value=amount)])

    def derive_generic_commitment(self, nullifier: Fr, secret: Fr) -> Fr:
        """Two-input commitment `hash2(nullifier, secret)` for value-agnostic notes."""
        return self.hasher.hash2(nullifier, secret)

    def derive_nullifier_hash(self, nullifier: Fr) -> Fr:
        """The public nullifier hash `H(nullifier)`."""
        return self.hasher.hash_n([nullifier])

    def generate_deposit(self, token: str, amount: int | str) -> DepositNote:
        """
        Create a fresh note for a deposit.

        Inputs are canonicalized before any randomness is drawn, so a
        rejected deposit consumes nothing from the random source.

        Raises:
            EncodingError: If the token or amount is malformed.
            RandomnessError: If the secure source is unavailable.
        """
        token_value = canonicalize_token(token, self.config)
        amount_value = canonicalize_amount(amount)

        nullifier = self.random_field_element()
        secret = self.random_field_element()
        commitment = self._commit(nullifier, secret, token_value, amount_value)

        logger.debug("Generated deposit commitment %s", commitment.to_hex())
        return DepositNote(
            commitment=commitment,
            nullifier=nullifier,
            secret=secret,
            token=token_value,
            amount=amount_value,
        )
