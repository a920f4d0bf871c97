"""Specifications for the BN254 scalar field."""

from .field import P, P_BITS, P_BYTES, Fr

__all__ = [
    "P",
    "P_BITS",
    "P_BYTES",
    "Fr",
]
