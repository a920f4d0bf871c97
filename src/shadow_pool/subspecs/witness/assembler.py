"""
Witness assembly for the membership circuit.

The withdrawal circuit proves, without revealing which leaf is spent, that
the prover knows `(nullifier, secret)` whose commitment sits under a given
root. Its private inputs are the note secrets and the authentication path;
its public inputs are the root, the nullifier hash and the recipient.
"""

from __future__ import annotations

import logging
from typing import Any, List

from pydantic import Field, model_validator

from shadow_pool.types import StrictBaseModel

from ..bn254.field import Fr
from ..commitment.encoding import recipient_to_field
from ..commitment.scheme import CommitmentScheme
from ..merkle.tree import IncrementalMerkleTree

logger = logging.getLogger(__name__)


class Witness(StrictBaseModel):
    """The complete input set for one membership proof."""

    root: Fr
    """Public: the tree root the path leads to."""

    nullifier_hash: Fr
    """Public: `H(nullifier)`."""

    recipient: Fr
    """Public: the withdrawal address bound into the proof."""

    nullifier: Fr
    """Private note secret."""

    secret: Fr
    """Private note secret."""

    path_elements: List[Fr]
    """Private: sibling values from the leaf level upwards."""

    is_left_child: List[bool]
    """Private: `True` where the running node is the left child at that level."""

    commitment: Fr
    """The leaf being proven. Not a circuit input."""

    leaf_index: int = Field(ge=0)
    """Position of the leaf. Not a circuit input."""

    @model_validator(mode="after")
    def check_path_lengths(self) -> "Witness":
        """The two path vectors must describe the same depth."""
        if len(self.path_elements) != len(self.is_left_child):
            raise ValueError(
                f"path_elements has {len(self.path_elements)} entries, "
                f"is_left_child has {len(self.is_left_child)}"
            )
        return self

    def to_circuit_inputs(self) -> dict[str, Any]:
        """
        Render the witness with the circuit's parameter names.

        Field elements become decimal strings and direction flags stay
        booleans, the form `Prover.toml` accepts.
        """
        return {
            "root": str(self.root.value),
            "nullifier_hash": str(self.nullifier_hash.value),
            "recipient": str(self.recipient.value),
            "nullifier": str(self.nullifier.value),
            "secret": str(self.secret.value),
            "merkle_proof": [str(element.value) for element in self.path_elements],
            "is_even": list(self.is_left_child),
        }


class WitnessAssembler:
    """Builds witnesses from a tree and a note. Never mutates the tree."""

    def __init__(self, scheme: CommitmentScheme):
        self.scheme = scheme

    def assemble(
        self,
        nullifier: Fr,
        secret: Fr,
        recipient: str | Fr,
        tree: IncrementalMerkleTree,
        leaf_index: int,
    ) -> Witness:
        """
        Build the witness for the leaf at `leaf_index`.

        Args:
            nullifier: The note nullifier.
            secret: The note secret.
            recipient: Withdrawal address, as a hex address or field element.
            tree: The tree holding the leaf.
            leaf_index: Index returned when the commitment was inserted.

        Raises:
            LeafNotFound: If the index is not in the tree.
            EncodingError: If the recipient is not a valid address.
        """
        recipient_fr = recipient_to_field(recipient, self.scheme.config)
        proof = tree.proof(leaf_index)

        logger.debug("Assembled witness for leaf %d under root %s", leaf_index, proof.root.to_hex())
        return Witness(
            root=proof.root,
            nullifier_hash=self.scheme.derive_nullifier_hash(nullifier),
            recipient=recipient_fr,
            nullifier=nullifier,
            secret=secret,
            path_elements=proof.path_elements,
            is_left_child=[bit == 0 for bit in proof.path_indices],
            commitment=proof.leaf,
            leaf_index=leaf_index,
        )
