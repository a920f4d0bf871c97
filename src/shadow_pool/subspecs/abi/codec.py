"""
Contract ABI encodings for notes and proofs.

Field elements cross the chain boundary as `bytes32` words (32-byte
big-endian) and proofs as dynamic `bytes`, exactly as the pool contract's
`deposit` and `withdraw` entry points declare them.
"""

from __future__ import annotations

from typing import Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

from shadow_pool.types import EncodingError

from ..bn254.field import Fr

NOTE_TYPES = ["bytes32", "bytes32", "bytes32"]
"""`(commitment, nullifier, secret)`."""

PROOF_TYPES = ["bytes", "bytes32[]"]
"""`(proof, public_inputs)`."""


def _words_to_fr(field_name: str, words: Sequence[bytes]) -> list[Fr]:
    try:
        return [Fr.from_bytes(word) for word in words]
    except ValueError as exc:
        raise EncodingError(field_name, str(exc)) from exc


def encode_note(commitment: Fr, nullifier: Fr, secret: Fr) -> bytes:
    """ABI-encode a note as three `bytes32` words."""
    return encode(NOTE_TYPES, [bytes(commitment), bytes(nullifier), bytes(secret)])


def decode_note(data: bytes) -> tuple[Fr, Fr, Fr]:
    """
    Decode `(commitment, nullifier, secret)`.

    Raises:
        EncodingError: If the data is malformed or a word is not a field element.
    """
    try:
        words = decode(NOTE_TYPES, data)
    except DecodingError as exc:
        raise EncodingError("note", str(exc)) from exc

    commitment, nullifier, secret = _words_to_fr("note", words)
    return commitment, nullifier, secret


def encode_proof(proof: bytes, public_inputs: Sequence[Fr]) -> bytes:
    """ABI-encode a proof and its public inputs."""
    return encode(PROOF_TYPES, [proof, [bytes(value) for value in public_inputs]])


def decode_proof(data: bytes) -> tuple[bytes, list[Fr]]:
    """
    Decode `(proof, public_inputs)`.

    Raises:
        EncodingError: If the data is malformed or an input is not a field element.
    """
    try:
        proof, words = decode(PROOF_TYPES, data)
    except DecodingError as exc:
        raise EncodingError("proof", str(exc)) from exc

    return proof, _words_to_fr("public_inputs", words)
