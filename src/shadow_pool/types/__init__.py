"""Reusable type definitions for the shadow pool core."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    CapacityExceeded,
    ConfigError,
    EncodingError,
    ExternalProverError,
    IndexOutOfRange,
    LeafNotFound,
    RandomnessError,
    ShadowPoolError,
    TreeIndexError,
)

__all__ = [
    "CamelModel",
    "StrictBaseModel",
    # Exceptions
    "ShadowPoolError",
    "ConfigError",
    "CapacityExceeded",
    "TreeIndexError",
    "IndexOutOfRange",
    "LeafNotFound",
    "EncodingError",
    "ExternalProverError",
    "RandomnessError",
]
