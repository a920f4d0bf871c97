"""
Round constant generation for Poseidon2 over BN254.

Constants are sampled with the Grain LFSR described in the Poseidon paper
(https://eprint.iacr.org/2019/458, Appendix F), seeded with the instance
description (field type, S-box, field size, width, round counts). Sampling
is deterministic, so every party derives the same table.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from functools import cache

from ..bn254.field import P, P_BITS, Fr

GRAIN_STATE_BITS = 80
"""Size of the Grain LFSR state."""

GRAIN_WARMUP_ROUNDS = 160
"""Number of initial LFSR outputs discarded before sampling."""

FIELD_TYPE_PRIME = 1
"""Grain seed tag for a prime field GF(p)."""

SBOX_TYPE_POWER = 0
"""Grain seed tag for a power S-box x^d."""


def _bits(value: int, width: int) -> list[int]:
    """Big-endian bit decomposition of `value` into exactly `width` bits."""
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def _grain_bits(width: int, rounds_f: int, rounds_p: int) -> Iterator[int]:
    """
    Yield the self-shrinking Grain LFSR output bits for a Poseidon instance.

    The 80-bit state is seeded with:
    field type (2) | S-box type (4) | field bits (12) | width (12) |
    full rounds (10) | partial rounds (10) | thirty 1-bits.
    """
    seed = (
        _bits(FIELD_TYPE_PRIME, 2)
        + _bits(SBOX_TYPE_POWER, 4)
        + _bits(P_BITS, 12)
        + _bits(width, 12)
        + _bits(rounds_f, 10)
        + _bits(rounds_p, 10)
        + [1] * 30
    )
    state = deque(seed, maxlen=GRAIN_STATE_BITS)

    def step() -> int:
        # Feedback taps: b62 + b51 + b38 + b23 + b13 + b0.
        bit = state[62] ^ state[51] ^ state[38] ^ state[23] ^ state[13] ^ state[0]
        state.append(bit)
        return bit

    for _ in range(GRAIN_WARMUP_ROUNDS):
        step()

    # Self-shrinking: bits come in pairs, a leading 1 emits the second bit,
    # a leading 0 discards it.
    while True:
        selector = step()
        while selector == 0:
            step()
            selector = step()
        yield step()


@cache
def generate_round_constants(
    width: int, rounds_f: int, rounds_p: int
) -> tuple[tuple[Fr, ...], ...]:
    """
    Sample one row of round constants per round.

    Each constant is a `P_BITS`-bit big-endian integer drawn from the Grain
    stream; draws that are not below P are rejected and redrawn.

    Full rounds draw `width` constants. Partial rounds draw a single one,
    and the rest of their row is zero.

    Args:
        width: The state width `t`.
        rounds_f: Total number of full rounds.
        rounds_p: Total number of partial rounds.

    Returns:
        `rounds_f + rounds_p` rows of `width` field elements.
    """
    stream = _grain_bits(width, rounds_f, rounds_p)

    def sample() -> int:
        while True:
            candidate = 0
            for _ in range(P_BITS):
                candidate = (candidate << 1) | next(stream)
            if candidate < P:
                return candidate

    half_f = rounds_f // 2
    rows: list[tuple[Fr, ...]] = []
    for round_idx in range(rounds_f + rounds_p):
        if half_f <= round_idx < half_f + rounds_p:
            rows.append((Fr(value=sample()),) + (Fr.zero(),) * (width - 1))
        else:
            rows.append(tuple(Fr(value=sample()) for _ in range(width)))
    return tuple(rows)
