"""
Tests for the incremental Merkle tree.
"""

from __future__ import annotations

import threading

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from shadow_pool.subspecs.bn254.field import P, Fr
from shadow_pool.subspecs.hasher import POSEIDON2_HASHER
from shadow_pool.subspecs.merkle import (
    EMPTY_LEAF,
    IncrementalMerkleTree,
    compute_root,
    compute_zero_values,
)
from shadow_pool.types import CapacityExceeded, ConfigError, IndexOutOfRange, LeafNotFound
from tests.shadow_pool.helpers import StubHasher, fr_list

STUB = StubHasher()

DEPTH = 3
POSEIDON_ZEROS = compute_zero_values(POSEIDON2_HASHER, DEPTH)
STUB_ZEROS = compute_zero_values(STUB, DEPTH)

leaf_values = st.integers(min_value=0, max_value=P - 1).map(lambda v: Fr(value=v))


def _poseidon_tree() -> IncrementalMerkleTree:
    return IncrementalMerkleTree(DEPTH, POSEIDON_ZEROS, POSEIDON2_HASHER)


def _stub_tree(depth: int = DEPTH) -> IncrementalMerkleTree:
    return IncrementalMerkleTree(depth, compute_zero_values(STUB, depth), STUB)


def test_depth_three_stub_scenario() -> None:
    """Insert [1, 2, 3] into a depth-3 tree under the additive stub hash."""
    tree = _stub_tree()
    indices = [tree.insert(leaf) for leaf in fr_list(1, 2, 3)]

    assert indices == [0, 1, 2]
    assert tree.leaf_count == 3
    assert len(tree) == 3
    assert tree.index_of(Fr(value=2)) == 1

    proof = tree.proof(1)
    assert proof.compute_root(STUB) == tree.root()
    assert proof.verify(STUB)

    # Leaves 1 + 2 + 3, one empty leaf, and an empty height-2 subtree.
    e = EMPTY_LEAF.value
    assert tree.root() == Fr(value=(6 + e + 4 * e) % P)


def test_empty_tree_root_is_top_zero_value() -> None:
    """A fresh tree's root is the empty subtree of full height."""
    tree = _poseidon_tree()
    assert tree.leaf_count == 0
    assert tree.root() == POSEIDON_ZEROS[DEPTH]
    assert tree.recompute_root() == POSEIDON_ZEROS[DEPTH]
    assert tree.leaves() == []


def test_zero_table_shape() -> None:
    """`zero[L] = hash2(zero[L-1], zero[L-1])` starting from the empty leaf."""
    zeros = compute_zero_values(POSEIDON2_HASHER, DEPTH)
    assert len(zeros) == DEPTH + 1
    assert zeros[0] == EMPTY_LEAF
    for level in range(1, DEPTH + 1):
        assert zeros[level] == POSEIDON2_HASHER.hash2(zeros[level - 1], zeros[level - 1])


@settings(max_examples=25)
@given(
    leaves=st.lists(leaf_values, max_size=1 << DEPTH),
    split=st.integers(min_value=0, max_value=1 << DEPTH),
)
def test_root_is_independent_of_batching(leaves: list[Fr], split: int) -> None:
    """One-by-one, batched and mixed insertion all give the reference root."""
    expected = compute_root(POSEIDON2_HASHER, DEPTH, leaves, POSEIDON_ZEROS)

    one_by_one = _poseidon_tree()
    for leaf in leaves:
        one_by_one.insert(leaf)

    batched = _poseidon_tree()
    batched.insert_many(leaves)

    mixed = _poseidon_tree()
    mixed.insert_many(leaves[:split])
    for leaf in leaves[split:]:
        mixed.insert(leaf)

    assert one_by_one.root() == expected
    assert batched.root() == expected
    assert mixed.root() == expected
    assert batched.recompute_root() == expected
    assert batched.leaves() == leaves


@settings(max_examples=15)
@given(leaves=st.lists(leaf_values, min_size=1, max_size=1 << DEPTH))
def test_every_proof_recomputes_root(leaves: list[Fr]) -> None:
    """Each inserted index yields a path that hashes back to the root."""
    tree = _poseidon_tree()
    tree.insert_many(leaves)
    root = tree.root()

    for index, leaf in enumerate(leaves):
        proof = tree.proof(index)
        assert proof.leaf == leaf
        assert proof.root == root
        assert proof.path_indices == [(index >> level) & 1 for level in range(DEPTH)]
        assert proof.compute_root(POSEIDON2_HASHER) == root


def test_proof_siblings_fall_back_to_zero_values() -> None:
    """Missing siblings are the zero value of their level."""
    tree = _poseidon_tree()
    tree.insert(Fr(value=42))

    proof = tree.proof(0)
    assert proof.path_elements == POSEIDON_ZEROS[:DEPTH]
    assert proof.path_indices == [0, 0, 0]


@given(leaves=st.lists(st.integers(min_value=0, max_value=3), max_size=8))
def test_index_of_returns_smallest_index(leaves: list[int]) -> None:
    """Duplicates resolve to their first position; absent values give None."""
    tree = _stub_tree()
    tree.insert_many(fr_list(*leaves))

    for value in range(5):
        expected = leaves.index(value) if value in leaves else None
        assert tree.index_of(Fr(value=value)) == expected


def test_insert_beyond_capacity_leaves_tree_unchanged() -> None:
    """The (2**depth + 1)-th insert fails and changes nothing."""
    tree = _stub_tree(depth=2)
    tree.insert_many(fr_list(1, 2, 3, 4))
    root_before = tree.root()

    with pytest.raises(CapacityExceeded) as exc_info:
        tree.insert(Fr(value=5))

    assert exc_info.value.capacity == 4
    assert exc_info.value.requested == 5
    assert tree.leaf_count == 4
    assert tree.root() == root_before
    assert tree.index_of(Fr(value=5)) is None


def test_insert_many_is_all_or_nothing() -> None:
    """A batch that does not fit inserts no leaf."""
    tree = _stub_tree(depth=2)
    tree.insert_many(fr_list(1, 2, 3))
    root_before = tree.root()

    with pytest.raises(CapacityExceeded):
        tree.insert_many(fr_list(4, 5))

    assert tree.leaf_count == 3
    assert tree.root() == root_before
    assert tree.insert_many([]) == []


@pytest.mark.parametrize("index", [-1, 3, 8])
def test_proof_for_missing_leaf(index: int) -> None:
    """Only inserted indices have proofs."""
    tree = _stub_tree()
    tree.insert_many(fr_list(1, 2, 3))

    with pytest.raises(LeafNotFound) as exc_info:
        tree.proof(index)
    assert exc_info.value.index == index
    assert exc_info.value.leaf_count == 3


def test_update_recomputes_path_and_index_map() -> None:
    """Updating a leaf matches a tree built with the new value."""
    tree = _poseidon_tree()
    tree.insert_many(fr_list(7, 8, 7))

    tree.update(0, Fr(value=9))

    expected = compute_root(POSEIDON2_HASHER, DEPTH, fr_list(9, 8, 7), POSEIDON_ZEROS)
    assert tree.root() == expected
    assert tree.leaves() == fr_list(9, 8, 7)
    # The old value now first appears at index 2.
    assert tree.index_of(Fr(value=7)) == 2
    assert tree.index_of(Fr(value=9)) == 0


def test_update_requires_existing_index() -> None:
    """Update never appends."""
    tree = _stub_tree()
    tree.insert(Fr(value=1))

    with pytest.raises(IndexOutOfRange, match="use insert"):
        tree.update(1, Fr(value=2))


def test_replay_restores_identical_tree() -> None:
    """Rebuilding from the leaf log reproduces root, indices and proofs."""
    original = _poseidon_tree()
    original.insert_many(fr_list(10, 20, 30, 40, 50))

    restored = IncrementalMerkleTree.replay(
        original.leaves(), DEPTH, POSEIDON_ZEROS, POSEIDON2_HASHER
    )

    assert restored.root() == original.root()
    assert restored.leaf_count == 5
    assert restored.proof(3) == original.proof(3)
    assert restored.index_of(Fr(value=50)) == 4


def test_empty_constructor_derives_zero_table() -> None:
    """`empty` builds the zero table from the hasher."""
    tree = IncrementalMerkleTree.empty(DEPTH, STUB)
    assert tree.zero_values == tuple(STUB_ZEROS)
    assert tree.capacity == 8


@pytest.mark.parametrize(
    "depth, zeros, match",
    [
        pytest.param(0, [EMPTY_LEAF], "between 1 and 32", id="depth_zero"),
        pytest.param(33, [EMPTY_LEAF] * 34, "between 1 and 32", id="depth_too_large"),
        pytest.param(3, STUB_ZEROS[:3], "Expected 4 zero values", id="short_table"),
        pytest.param(3, [EMPTY_LEAF] * 4, "inconsistent", id="inconsistent_table"),
    ],
)
def test_invalid_configuration(depth: int, zeros: list[Fr], match: str) -> None:
    """Bad depths and zero tables are configuration errors."""
    with pytest.raises(ConfigError, match=match):
        IncrementalMerkleTree(depth, zeros, STUB)


def test_zero_table_must_match_hasher() -> None:
    """A table built for one hasher is rejected by another."""
    with pytest.raises(ConfigError, match="inconsistent"):
        IncrementalMerkleTree(DEPTH, STUB_ZEROS, POSEIDON2_HASHER)


def test_concurrent_inserts_assign_distinct_indices() -> None:
    """Writers are serialized: every leaf gets its own slot."""
    tree = _stub_tree(depth=6)
    results: list[int] = []
    lock = threading.Lock()

    def worker(start: int) -> None:
        for value in range(start, start + 16):
            index = tree.insert(Fr(value=value))
            with lock:
                results.append(index)

    threads = [threading.Thread(target=worker, args=(i * 16,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results) == list(range(64))
    assert tree.root() == tree.recompute_root()
