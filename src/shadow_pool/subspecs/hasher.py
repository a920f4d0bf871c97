"""
The hash capability used by the Merkle tree and the commitment scheme.

Everything above this module depends only on the `Hasher` protocol:

- `hash2(left, right)` for every internal tree node,
- `hash_n(inputs)` for commitments and nullifier hashes.

The production instance is a Poseidon2 sponge over BN254. Tests inject
cheap deterministic stand-ins through the same protocol.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from .bn254.field import Fr
from .poseidon2.permutation import PARAMS_3, Poseidon2Params, permute


class Hasher(Protocol):
    """A stateless, deterministic hash over field elements."""

    def hash2(self, left: Fr, right: Fr) -> Fr:
        """Hash an ordered pair of field elements."""
        ...

    def hash_n(self, inputs: Sequence[Fr]) -> Fr:
        """Hash a non-empty sequence of field elements."""
        ...


class Poseidon2Hasher:
    """
    Poseidon2 in sponge mode.

    ### Sponge Algorithm

    1.  **Initialization**: The width-3 state is split into a rate of 2
        elements and a capacity of 1 element. The capacity is initialized
        with `len(inputs) << 64`, so inputs of different lengths never share
        a starting state.

    2.  **Absorbing**: Inputs are added to the rate part in chunks of 2,
        zero-padded at the end, permuting after each chunk.

    3.  **Squeezing**: A single element is extracted from the first rate
        position.

    `hash2(a, b)` is the sponge over `[a, b]`, a single permutation call.
    """

    def __init__(self, params: Poseidon2Params):
        """Initializes the hasher with a specific Poseidon2 permutation."""
        if params.width < 2:
            raise ValueError("Sponge needs at least one rate and one capacity element.")
        self.params = params
        self.rate = params.width - 1

    def hash_n(self, inputs: Sequence[Fr]) -> Fr:
        """Absorb `inputs` and squeeze one field element."""
        if len(inputs) == 0:
            raise ValueError("Cannot hash an empty input.")

        # Rate part is zero, capacity part is the length-based domain tag.
        state = [Fr.zero()] * self.params.width
        state[self.rate] = Fr(value=len(inputs) << 64)

        # Pad the input vector with zeros to be an exact multiple of the rate size.
        num_extra = (self.rate - (len(inputs) % self.rate)) % self.rate
        padded = list(inputs) + [Fr.zero()] * num_extra

        for i in range(0, len(padded), self.rate):
            chunk = padded[i : i + self.rate]
            for j in range(self.rate):
                state[j] += chunk[j]
            state = permute(state, self.params)

        return state[0]

    def hash2(self, left: Fr, right: Fr) -> Fr:
        """Hash two tree nodes into their parent."""
        return self.hash_n([left, right])


POSEIDON2_HASHER = Poseidon2Hasher(PARAMS_3)
"""The production hasher shared by the tree and the commitment scheme."""
