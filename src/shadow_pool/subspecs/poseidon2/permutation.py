"""
A minimal Python specification for the Poseidon2 permutation over BN254.

The design is based on the paper "Poseidon2: A Faster Version of the Poseidon
Hash Function" (https://eprint.iacr.org/2023/323).

Only the width-3 instance is specified: it is the smallest width that can
absorb a pair of tree nodes per permutation call.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..bn254.field import Fr
from .constants import generate_round_constants

# =================================================================
# Poseidon2 Parameter Definitions
# =================================================================

S_BOX_DEGREE = 5
"""
The S-box exponent `d`.

For fields where `gcd(d, p-1) = 1`, `x -> x^d` is a permutation.

For BN254, `gcd(3, p-1) != 1`, so the smallest valid degree is 5.
"""


class Poseidon2Params(BaseModel):
    """Parameters for a specific Poseidon2 instance."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    width: int = Field(gt=1, description="The size of the state (t).")
    rounds_f: int = Field(gt=0, description="Total number of 'full' rounds.")
    rounds_p: int = Field(ge=0, description="Total number of 'partial' rounds.")
    internal_diag_vector: List[Fr] = Field(
        min_length=1,
        description="Diagonal D of the internal linear layer M_I = J + D.",
    )
    round_constants: List[List[Fr]] = Field(
        min_length=1,
        description="One row of `width` constants per round.",
    )

    @model_validator(mode="after")
    def check_lengths(self) -> "Poseidon2Params":
        """Ensures vector lengths match the configuration."""
        if self.rounds_f % 2 != 0:
            raise ValueError("Number of full rounds must be even.")

        if len(self.internal_diag_vector) != self.width:
            raise ValueError("Length of internal_diag_vector must equal width.")

        if len(self.round_constants) != self.rounds_f + self.rounds_p:
            raise ValueError("Incorrect number of round constant rows provided.")

        if any(len(row) != self.width for row in self.round_constants):
            raise ValueError("Every round constant row must have `width` entries.")

        return self


_WIDTH_3_ROUNDS_F = 8
_WIDTH_3_ROUNDS_P = 56

# Parameters for WIDTH = 3
#
# M_I = J + diag(1, 1, 2) = [[2, 1, 1], [1, 2, 1], [1, 1, 3]], as given in
# the paper for t = 3.
PARAMS_3 = Poseidon2Params(
    width=3,
    rounds_f=_WIDTH_3_ROUNDS_F,
    rounds_p=_WIDTH_3_ROUNDS_P,
    internal_diag_vector=[Fr(value=1), Fr(value=1), Fr(value=2)],
    round_constants=[
        list(row) for row in generate_round_constants(3, _WIDTH_3_ROUNDS_F, _WIDTH_3_ROUNDS_P)
    ],
)


def external_linear_layer(state: List[Fr]) -> List[Fr]:
    """
    Applies the external linear layer (M_E) for t = 3.

    For t in {2, 3} the paper uses M_E = circ(2, 1, ..., 1): every output is
    the sum of the whole state plus the element itself. This is MDS for
    t = 3 and costs O(t).

    Args:
        state: The current state vector.

    Returns:
        The state vector after applying the external linear layer.
    """
    total = sum(state, Fr.zero())
    return [total + s for s in state]


def internal_linear_layer(state: List[Fr], params: Poseidon2Params) -> List[Fr]:
    """
    Applies the internal linear layer (M_I).

    This layer is used during partial rounds. Its matrix is M_I = J + D, where
    J is the all-ones matrix and D is diagonal, so M_I * s = J*s + D*s. The
    term J*s is a vector where each element is the sum of all elements in s.

    Args:
        state: The current state vector.
        params: The Poseidon2Params object containing the diagonal vector.

    Returns:
        The state vector after applying the internal linear layer.
    """
    total = sum(state, Fr.zero())
    return [total + d * s for d, s in zip(params.internal_diag_vector, state, strict=True)]


def permute(state: List[Fr], params: Poseidon2Params) -> List[Fr]:
    """
    Performs the full Poseidon2 permutation on the given state.

    The permutation follows the structure:
    Initial Layer -> Full Rounds -> Partial Rounds -> Full Rounds

    Args:
        state: A list of Fr elements representing the current state.
        params: The object defining the permutation's configuration.

    Returns:
        The new state after applying the permutation.
    """
    if len(state) != params.width:
        raise ValueError(f"Input state must have length {params.width}")

    round_constants = params.round_constants
    half_rounds_f = params.rounds_f // 2
    round_idx = 0

    # 1. Initial Linear Layer
    state = external_linear_layer(list(state))

    # 2. First Half of Full Rounds (R_F / 2)
    for _r in range(half_rounds_f):
        constants = round_constants[round_idx]
        round_idx += 1
        state = [(s + c) ** S_BOX_DEGREE for s, c in zip(state, constants, strict=True)]
        state = external_linear_layer(state)

    # 3. Partial Rounds (R_P)
    for _r in range(params.rounds_p):
        # Only the first constant of the row is used, and only the first
        # element goes through the S-box.
        state[0] = (state[0] + round_constants[round_idx][0]) ** S_BOX_DEGREE
        round_idx += 1
        state = internal_linear_layer(state, params)

    # 4. Second Half of Full Rounds (R_F / 2)
    for _r in range(half_rounds_f):
        constants = round_constants[round_idx]
        round_idx += 1
        state = [(s + c) ** S_BOX_DEGREE for s, c in zip(state, constants, strict=True)]
        state = external_linear_layer(state)

    return state
