"""Exception hierarchy for the shadow pool core."""

from __future__ import annotations

from typing import Any


class ShadowPoolError(Exception):
    """
    Base exception for all errors raised by the core.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigError(ShadowPoolError):
    """
    Raised when tree or prover parameters are inconsistent.

    Unrecoverable for the current operation.
    """


class CapacityExceeded(ShadowPoolError):
    """
    Raised when an insertion would exceed `2**depth` leaves.

    Attributes:
        capacity: Maximum number of leaves the tree can hold.
        requested: Number of leaves the tree would hold after the insertion.
    """

    def __init__(self, capacity: int, requested: int) -> None:
        self.capacity = capacity
        self.requested = requested
        super().__init__(f"Tree is full: capacity is {capacity} leaves, requested {requested}")


class TreeIndexError(ShadowPoolError):
    """
    Base class for errors about a leaf index outside the populated range.

    Attributes:
        index: The offending leaf index, or None when a leaf was looked up by value.
        leaf_count: Number of leaves in the tree when the error was raised.
    """

    def __init__(self, index: int | None, leaf_count: int, *, detail: str | None = None) -> None:
        self.index = index
        self.leaf_count = leaf_count

        if index is None:
            msg = f"No matching leaf in a tree with {leaf_count} leaves"
        else:
            msg = f"Leaf index {index} is out of range for a tree with {leaf_count} leaves"
        if detail:
            msg = f"{msg}: {detail}"

        super().__init__(msg)


class IndexOutOfRange(TreeIndexError):
    """Raised by `update` when the index has not been inserted yet."""


class LeafNotFound(TreeIndexError):
    """
    Raised when a proof is requested for a leaf that is not in the tree.

    A stale index (the tree was reset or rehydrated from a shorter log
    between commitment creation and witness assembly) also lands here.
    """


class EncodingError(ShadowPoolError):
    """
    Raised when a token, amount, address or field encoding is malformed.

    Attributes:
        field_name: The input that failed to encode.
        value: The rejected value (truncated for display).
    """

    def __init__(self, field_name: str, detail: str, value: Any = None) -> None:
        self.field_name = field_name
        self.value = value

        msg = f"Invalid {field_name}: {detail}"
        if value is not None:
            value_repr = repr(value)
            if len(value_repr) > 80:
                value_repr = value_repr[:77] + "..."
            msg = f"{msg} (got {value_repr})"

        super().__init__(msg)


class ExternalProverError(ShadowPoolError):
    """
    Raised when the proving backend fails or returns no proof.

    The leaf that was being proven stays in the tree; callers may retry
    proof generation against the same leaf index.

    Attributes:
        leaf_index: The already-inserted leaf the proof was for, if known.
    """

    def __init__(self, message: str, *, leaf_index: int | None = None) -> None:
        self.leaf_index = leaf_index
        super().__init__(message)


class RandomnessError(ShadowPoolError):
    """
    Raised when the secure random source is unavailable.

    Fatal: the core never falls back to a weaker generator.
    """
