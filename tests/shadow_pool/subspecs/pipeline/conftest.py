"""Shared fixtures for pipeline tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from shadow_pool.subspecs.commitment import CommitmentScheme, Rand
from shadow_pool.subspecs.merkle import IncrementalMerkleTree
from shadow_pool.subspecs.pipeline import Prover, ProverContext, ProofPipeline
from tests.shadow_pool.helpers import TEST_CIRCUIT, FakeProver, StubHasher

STUB = StubHasher()


@pytest.fixture
def tree() -> IncrementalMerkleTree:
    """An empty depth-3 tree under the stub hash."""
    return IncrementalMerkleTree.empty(3, STUB)


@pytest.fixture
def scheme() -> CommitmentScheme:
    """A stub-hash scheme drawing from the OS random source."""
    return CommitmentScheme(hasher=STUB, rand=Rand())


@pytest.fixture
def pipeline_factory(
    tree: IncrementalMerkleTree, scheme: CommitmentScheme
) -> Callable[..., ProofPipeline]:
    """Build pipelines over the shared tree with a chosen prover."""

    def factory(prover: Prover | None = None) -> ProofPipeline:
        context = ProverContext(circuit=TEST_CIRCUIT, prover=prover or FakeProver())
        return ProofPipeline(tree=tree, context=context, scheme=scheme)

    return factory
