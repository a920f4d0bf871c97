"""Test helpers for shadow pool unit tests."""

from __future__ import annotations

from shadow_pool.subspecs.bn254 import Fr
from shadow_pool.subspecs.pipeline import CircuitArtifact

from .mocks import (
    FailingProver,
    FakeProver,
    NoneProver,
    SequenceRandBelow,
    StubHasher,
    prover_error,
    unavailable_randbelow,
)

ZERO_ADDRESS = "0x" + "00" * 20
"""Native ETH."""

RECIPIENT = "0x" + "ab" * 20
"""A fixed withdrawal address."""

TEST_CIRCUIT = CircuitArtifact(bytecode="H4sIAAAAAAAA/w==", abi={"parameters": []})
"""A circuit artifact the fake provers never inspect."""


def fr_list(*values: int) -> list[Fr]:
    """Wrap integers as field elements."""
    return [Fr(value=v) for v in values]


__all__ = [
    "RECIPIENT",
    "TEST_CIRCUIT",
    "ZERO_ADDRESS",
    "FailingProver",
    "FakeProver",
    "NoneProver",
    "SequenceRandBelow",
    "StubHasher",
    "fr_list",
    "prover_error",
    "unavailable_randbelow",
]
