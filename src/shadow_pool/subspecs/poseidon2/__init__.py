"""Specification for the Poseidon2 permutation over BN254."""

from .constants import generate_round_constants
from .permutation import (
    PARAMS_3,
    Poseidon2Params,
    permute,
)

__all__ = [
    "permute",
    "PARAMS_3",
    "Poseidon2Params",
    "generate_round_constants",
]
