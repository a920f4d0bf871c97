"""Merkle inclusion proofs for commitment leaves."""

from __future__ import annotations

from typing import List

from pydantic import Field, model_validator

from shadow_pool.types import StrictBaseModel

from ..bn254.field import Fr
from ..hasher import Hasher


class MerkleProof(StrictBaseModel):
    """
    A Merkle authentication path from a leaf to the root.

    `path_indices[i] = 0` means the running node is the left child at level
    `i` (its sibling `path_elements[i]` is on the right); `1` means it is the
    right child. The bits are exactly the binary digits of `leaf_index`,
    least significant first.
    """

    root: Fr
    """The root the path was extracted against."""

    leaf: Fr
    """The committed leaf value."""

    leaf_index: int = Field(ge=0)
    """The 0-based insertion index of the leaf."""

    path_elements: List[Fr]
    """Sibling values, from the leaf level up to the level below the root."""

    path_indices: List[int]
    """Direction bits, one per level."""

    @model_validator(mode="after")
    def check_path_shape(self) -> "MerkleProof":
        """Ensure the path is well formed and agrees with the leaf index."""
        depth = len(self.path_elements)
        if len(self.path_indices) != depth:
            raise ValueError(
                f"path_indices has {len(self.path_indices)} entries, expected {depth}"
            )

        if self.leaf_index >= 1 << depth:
            raise ValueError(f"leaf_index {self.leaf_index} does not fit a depth-{depth} path")

        for level, bit in enumerate(self.path_indices):
            if bit not in (0, 1):
                raise ValueError(f"path_indices[{level}] must be 0 or 1, got {bit}")
            if bit != (self.leaf_index >> level) & 1:
                raise ValueError(f"path_indices[{level}] disagrees with leaf_index")

        return self

    @property
    def depth(self) -> int:
        """The depth of the tree this proof belongs to."""
        return len(self.path_elements)

    def compute_root(self, hasher: Hasher) -> Fr:
        """
        Recompute the root by climbing from the leaf.

        At each level the running node is placed left or right of the
        sibling according to the direction bit, and the pair is hashed.
        """
        current = self.leaf
        for sibling, bit in zip(self.path_elements, self.path_indices, strict=True):
            if bit == 0:
                current = hasher.hash2(current, sibling)
            else:
                current = hasher.hash2(sibling, current)
        return current

    def verify(self, hasher: Hasher) -> bool:
        """Return whether the path reproduces `root`."""
        return self.compute_root(hasher) == self.root
