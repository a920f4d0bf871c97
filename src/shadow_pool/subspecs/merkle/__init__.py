"""
The commitment tree: an append-only incremental Merkle tree with sparse
storage, its zero table, and inclusion proofs.
"""

from .proof import MerkleProof
from .tree import IncrementalMerkleTree
from .zeros import EMPTY_LEAF, compute_root, compute_zero_values

__all__ = [
    "EMPTY_LEAF",
    "IncrementalMerkleTree",
    "MerkleProof",
    "compute_root",
    "compute_zero_values",
]
