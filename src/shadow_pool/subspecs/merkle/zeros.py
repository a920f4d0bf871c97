"""
Zero values and from-scratch root computation.

An empty subtree of height `L` is represented by a single precomputed value
`zero[L]`, so the tree never has to materialize the `2**depth` empty leaves:

    zero[0] = EMPTY_LEAF
    zero[L] = hash2(zero[L-1], zero[L-1])
"""

from __future__ import annotations

from typing import Sequence

from Crypto.Hash import keccak

from shadow_pool.types import CapacityExceeded

from ..bn254.field import Fr
from ..hasher import Hasher

EMPTY_LEAF_SEED = b"shadow_pool"
"""Preimage of the canonical empty leaf."""


def _empty_leaf() -> Fr:
    # keccak256 of a public tag, reduced into the field. Nobody knows a
    # commitment preimage hashing to it, so an empty slot can never be
    # proven as a deposit.
    digest = keccak.new(digest_bits=256)
    digest.update(EMPTY_LEAF_SEED)
    return Fr.reduce(int.from_bytes(digest.digest(), byteorder="big"))


EMPTY_LEAF: Fr = _empty_leaf()
"""The canonical value of an empty leaf slot, `keccak256("shadow_pool") mod P`."""


def compute_zero_values(hasher: Hasher, depth: int, empty_leaf: Fr = EMPTY_LEAF) -> list[Fr]:
    """
    Build the `depth + 1` entry zero table for a tree.

    Args:
        hasher: The hash used for internal nodes.
        depth: The tree depth.
        empty_leaf: The value of an empty leaf slot.

    Returns:
        `[zero[0], ..., zero[depth]]`.
    """
    zeros = [empty_leaf]
    for _ in range(depth):
        zeros.append(hasher.hash2(zeros[-1], zeros[-1]))
    return zeros


def compute_root(
    hasher: Hasher,
    depth: int,
    leaves: Sequence[Fr],
    zero_values: Sequence[Fr],
) -> Fr:
    """
    Compute a tree root directly from its ordered leaves.

    This is the reference the incremental tree is checked against: the
    leaves are hashed level by level, and any missing right sibling is the
    zero value of that level.

    Raises:
        CapacityExceeded: If there are more than `2**depth` leaves.
    """
    if len(leaves) > 1 << depth:
        raise CapacityExceeded(capacity=1 << depth, requested=len(leaves))

    layer = list(leaves)
    for level in range(depth):
        parents = []
        for i in range(0, len(layer), 2):
            left = layer[i]
            right = layer[i + 1] if i + 1 < len(layer) else zero_values[level]
            parents.append(hasher.hash2(left, right))
        layer = parents

    return layer[0] if layer else zero_values[depth]
