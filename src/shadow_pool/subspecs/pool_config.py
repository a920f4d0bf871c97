"""
Configuration presets for a shadow pool deployment.

A production preset mirrors the deployed pool contract (a depth-20 tree,
about one million deposits). A test preset keeps trees small so that the
full Poseidon2 path stays cheap in unit tests.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Final

from shadow_pool.config import SHADOW_POOL_ENV

MAX_TREE_DEPTH: Final = 32
"""Largest supported tree depth. Leaf indices must fit in a `uint32`."""


class PoolConfig(BaseModel):
    """A model holding the configuration constants for a pool preset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    TREE_DEPTH: int = Field(ge=1, le=MAX_TREE_DEPTH)
    """Depth of the commitment tree. Level 0 holds leaves, level `TREE_DEPTH` the root."""

    @property
    def TREE_CAPACITY(self) -> int:  # noqa: N802
        """The maximum number of deposits the tree can hold."""
        return 1 << self.TREE_DEPTH

    ADDRESS_HEX_LEN: int
    """Number of hex digits in a canonical chain address (20 bytes)."""

    ADDRESS_BITS: int
    """Width of a canonical address once converted to an integer."""

    WIDE_ZERO_HEX_LEN: int
    """
    Number of hex digits in the 32-byte zero word.

    The frontend sometimes passes native ETH as a full zero word instead of
    the zero address. Both map to token 0.
    """


PROD_CONFIG: Final = PoolConfig(
    TREE_DEPTH=20,
    ADDRESS_HEX_LEN=40,
    ADDRESS_BITS=160,
    WIDE_ZERO_HEX_LEN=64,
)

TEST_CONFIG: Final = PoolConfig(
    TREE_DEPTH=4,
    ADDRESS_HEX_LEN=40,
    ADDRESS_BITS=160,
    WIDE_ZERO_HEX_LEN=64,
)

TARGET_CONFIG: Final = PROD_CONFIG if SHADOW_POOL_ENV == "prod" else TEST_CONFIG
"""The preset selected by `SHADOW_POOL_ENV`."""
