"""Chain-boundary encodings."""

from .codec import decode_note, decode_proof, encode_note, encode_proof

__all__ = ["decode_note", "decode_proof", "encode_note", "encode_proof"]
