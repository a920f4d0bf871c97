"""The output of a successful pipeline run."""

from __future__ import annotations

from typing import List

from pydantic import Field

from shadow_pool.types import StrictBaseModel

from ..abi.codec import encode_note, encode_proof
from ..bn254.field import Fr


class ProofBundle(StrictBaseModel):
    """A membership proof together with the note and tree position it is for."""

    commitment: Fr
    nullifier: Fr
    secret: Fr

    proof: bytes
    """Opaque proof bytes from the external prover."""

    public_inputs: List[Fr]
    """Public inputs as reported by the prover."""

    merkle_root: Fr
    """The root the witness was assembled against."""

    nullifier_hash: Fr

    leaf_index: int = Field(ge=0)

    def to_abi(self) -> bytes:
        """ABI-encode `(bytes proof, bytes32[] public_inputs)` for the verifier."""
        return encode_proof(self.proof, self.public_inputs)

    def note_abi(self) -> bytes:
        """ABI-encode the note `(commitment, nullifier, secret)`."""
        return encode_note(self.commitment, self.nullifier, self.secret)
