"""
Implements the append-only incremental Merkle tree holding deposit commitments.

### Role in the pool

Every deposit appends one commitment as a leaf. A withdrawal later proves,
in zero knowledge, that it knows the preimage of *some* leaf under a public
root, together with the authentication path that connects that leaf to the
root. The tree therefore has to

1.  assign each commitment a stable index in arrival order,
2.  keep its root equal to the hash closure of all leaves padded with
    empty subtrees, and
3.  hand out authentication paths for any inserted index.

### Sparse storage

A production tree has depth 20 (about a million slots), and the maximum
supported depth is 32. Materializing `2**depth` nodes is not an option.
Only nodes that lie on the path of an inserted leaf are stored, in a
mapping keyed by `(level, index)`. Any absent node is the zero value of its
level, which stands for an empty subtree of that height. Memory grows with
the number of leaves times the depth, never with the capacity.

### Atomic updates

A mutation first computes every node on the affected path into a staging
map using the committed nodes as siblings. Only when the whole path is known
is it merged into the store, together with the new leaf count. Readers
share the same lock, so they observe either the tree before the leaf or the
tree after it with its full path, never a partially updated path.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Sequence

from shadow_pool.types import (
    CapacityExceeded,
    ConfigError,
    IndexOutOfRange,
    LeafNotFound,
)

from ..bn254.field import Fr
from ..hasher import POSEIDON2_HASHER, Hasher
from ..pool_config import MAX_TREE_DEPTH
from .proof import MerkleProof
from .zeros import EMPTY_LEAF, compute_root, compute_zero_values

logger = logging.getLogger(__name__)

NodeKey = tuple[int, int]
"""A node position: `(level, index)` with level 0 at the leaves."""


class IncrementalMerkleTree:
    """A fixed-depth, append-only Merkle tree over field elements."""

    def __init__(
        self,
        depth: int,
        zero_values: Sequence[Fr],
        hasher: Hasher = POSEIDON2_HASHER,
    ):
        """
        Create an empty tree.

        Args:
            depth: Number of levels above the leaves. Capacity is `2**depth`.
            zero_values: `depth + 1` empty-subtree values, `zero_values[L]`
                being the root of an empty subtree of height `L`.
            hasher: Hash used for internal nodes.

        Raises:
            ConfigError: If the depth is unsupported, or the zero table has
                the wrong length or was not built with `hasher`.
        """
        if not 1 <= depth <= MAX_TREE_DEPTH:
            raise ConfigError(f"Tree depth must be between 1 and {MAX_TREE_DEPTH}, got {depth}")

        if len(zero_values) != depth + 1:
            raise ConfigError(
                f"Expected {depth + 1} zero values for depth {depth}, got {len(zero_values)}"
            )

        # The zero table must be the hash closure of the empty leaf, otherwise
        # roots would not match what the circuit and the contract compute.
        for level in range(1, depth + 1):
            below = zero_values[level - 1]
            if hasher.hash2(below, below) != zero_values[level]:
                raise ConfigError(f"Zero value at level {level} is inconsistent with the hasher")

        self.depth = depth
        self.hasher = hasher
        self.zero_values: tuple[Fr, ...] = tuple(zero_values)

        self._nodes: dict[NodeKey, Fr] = {}
        self._first_index: dict[Fr, int] = {}
        self._leaf_count = 0
        self._lock = threading.Lock()

    @classmethod
    def empty(
        cls,
        depth: int,
        hasher: Hasher = POSEIDON2_HASHER,
        empty_leaf: Fr = EMPTY_LEAF,
    ) -> "IncrementalMerkleTree":
        """Create an empty tree whose zero table is derived from `empty_leaf`."""
        if not 1 <= depth <= MAX_TREE_DEPTH:
            raise ConfigError(f"Tree depth must be between 1 and {MAX_TREE_DEPTH}, got {depth}")
        return cls(depth, compute_zero_values(hasher, depth, empty_leaf), hasher)

    @classmethod
    def replay(
        cls,
        leaves: Iterable[Fr],
        depth: int,
        zero_values: Sequence[Fr],
        hasher: Hasher = POSEIDON2_HASHER,
    ) -> "IncrementalMerkleTree":
        """
        Rebuild a tree from the ordered leaf log.

        The core keeps no persistent state: the ordered sequence of deposit
        commitments (from the contract's events) is the source of truth, and
        replaying it into an empty tree of the same shape restores the exact
        same nodes, indices and root.
        """
        tree = cls(depth, zero_values, hasher)
        tree.insert_many(leaves)
        return tree

    # -----------------------------------------------------------------
    # Read side
    # -----------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Maximum number of leaves."""
        return 1 << self.depth

    @property
    def leaf_count(self) -> int:
        """Number of leaves inserted so far."""
        with self._lock:
            return self._leaf_count

    def __len__(self) -> int:
        return self.leaf_count

    def _node(self, level: int, index: int) -> Fr:
        # Absent nodes are empty subtrees.
        return self._nodes.get((level, index), self.zero_values[level])

    def root(self) -> Fr:
        """The current root. Equal to `recompute_root()` at all times."""
        with self._lock:
            return self._node(self.depth, 0)

    def leaves(self) -> list[Fr]:
        """The ordered leaf log."""
        with self._lock:
            return [self._nodes[(0, i)] for i in range(self._leaf_count)]

    def recompute_root(self) -> Fr:
        """Compute the root from the stored leaves alone, ignoring cached nodes."""
        return compute_root(self.hasher, self.depth, self.leaves(), self.zero_values)

    def index_of(self, leaf: Fr) -> int | None:
        """
        Find the position of a leaf.

        Returns:
            The smallest index at which `leaf` was inserted, or `None` if the
            value is not in the tree.
        """
        with self._lock:
            return self._first_index.get(leaf)

    def proof(self, index: int) -> MerkleProof:
        """
        Extract the authentication path of an inserted leaf.

        The walk climbs from `(0, index)` to the root. At each level the
        sibling is found by flipping the last bit of the running index, and
        the direction bit is the last bit itself.

        Raises:
            LeafNotFound: If `index` has not been inserted.
        """
        with self._lock:
            if not 0 <= index < self._leaf_count:
                raise LeafNotFound(index, self._leaf_count)

            path_elements: list[Fr] = []
            path_indices: list[int] = []
            current_index = index
            for level in range(self.depth):
                path_elements.append(self._node(level, current_index ^ 1))
                path_indices.append(current_index & 1)
                current_index >>= 1

            return MerkleProof(
                root=self._node(self.depth, 0),
                leaf=self._nodes[(0, index)],
                leaf_index=index,
                path_elements=path_elements,
                path_indices=path_indices,
            )

    # -----------------------------------------------------------------
    # Write side
    # -----------------------------------------------------------------

    def _stage_path(self, index: int, leaf: Fr) -> dict[NodeKey, Fr]:
        """
        Compute the nodes from `(0, index)` up to the root for a new leaf value.

        Siblings are read from the committed store; nothing is written.
        """
        staged: dict[NodeKey, Fr] = {}
        current = leaf
        current_index = index
        for level in range(self.depth):
            staged[(level, current_index)] = current
            sibling = self._node(level, current_index ^ 1)
            if current_index % 2 == 0:
                current = self.hasher.hash2(current, sibling)
            else:
                current = self.hasher.hash2(sibling, current)
            current_index >>= 1
        staged[(self.depth, 0)] = current
        return staged

    def insert(self, leaf: Fr) -> int:
        """
        Append a leaf.

        Returns:
            The index assigned to the leaf, equal to the leaf count before
            the call.

        Raises:
            CapacityExceeded: If the tree already holds `2**depth` leaves.
                The tree is unchanged.
        """
        with self._lock:
            if self._leaf_count >= self.capacity:
                raise CapacityExceeded(self.capacity, self._leaf_count + 1)

            index = self._leaf_count
            staged = self._stage_path(index, leaf)

            self._nodes.update(staged)
            self._first_index.setdefault(leaf, index)
            self._leaf_count += 1

        logger.debug("Inserted leaf %d, root %s", index, staged[(self.depth, 0)].to_hex())
        return index

    def insert_many(self, leaves: Iterable[Fr]) -> list[int]:
        """
        Append several leaves at once.

        The batch is hashed level by level: at each level only the parents
        whose children changed are recomputed, so each shared ancestor is
        hashed once instead of once per leaf. The resulting nodes are
        identical to inserting the leaves one by one.

        Returns:
            The indices assigned to the leaves, in order.

        Raises:
            CapacityExceeded: If the whole batch does not fit. No leaf of the
                batch is inserted.
        """
        batch = list(leaves)
        if not batch:
            return []

        with self._lock:
            start = self._leaf_count
            end = start + len(batch)
            if end > self.capacity:
                raise CapacityExceeded(self.capacity, end)

            staged: dict[NodeKey, Fr] = {(0, start + i): leaf for i, leaf in enumerate(batch)}

            def lookup(level: int, index: int) -> Fr:
                node = staged.get((level, index))
                return node if node is not None else self._node(level, index)

            first, last = start, end - 1
            for level in range(self.depth):
                for parent in range(first >> 1, (last >> 1) + 1):
                    left = lookup(level, 2 * parent)
                    right = lookup(level, 2 * parent + 1)
                    staged[(level + 1, parent)] = self.hasher.hash2(left, right)
                first, last = first >> 1, last >> 1

            self._nodes.update(staged)
            for i, leaf in enumerate(batch):
                self._first_index.setdefault(leaf, start + i)
            self._leaf_count = end

        logger.debug("Inserted leaves %d..%d", start, end - 1)
        return list(range(start, end))

    def update(self, index: int, new_leaf: Fr) -> None:
        """
        Overwrite an existing leaf and recompute its path.

        Only used to repair tree state during recovery: deposits themselves
        are append-only.

        Raises:
            IndexOutOfRange: If `index` has not been inserted yet.
        """
        with self._lock:
            if not 0 <= index < self._leaf_count:
                raise IndexOutOfRange(
                    index, self._leaf_count, detail="use insert for new leaves"
                )

            old_leaf = self._nodes[(0, index)]
            staged = self._stage_path(index, new_leaf)
            self._nodes.update(staged)

            # Keep the value -> smallest index map exact for both values.
            if self._first_index.get(old_leaf) == index:
                del self._first_index[old_leaf]
                for i in range(index + 1, self._leaf_count):
                    if self._nodes[(0, i)] == old_leaf:
                        self._first_index[old_leaf] = i
                        break

            current = self._first_index.get(new_leaf)
            if current is None or index < current:
                self._first_index[new_leaf] = index

        logger.debug("Updated leaf %d", index)
