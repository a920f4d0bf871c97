"""
Global configuration for the shadow pool core.

This module contains environment-specific settings that apply across all subspecs.
"""

import os

_SUPPORTED_POOL_ENVS: list[str] = ["prod", "test"]

SHADOW_POOL_ENV = os.environ.get("SHADOW_POOL_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if SHADOW_POOL_ENV not in _SUPPORTED_POOL_ENVS:
    raise ValueError(
        f"Invalid SHADOW_POOL_ENV environment variable: '{SHADOW_POOL_ENV}'. "
        f"Supported values: {_SUPPORTED_POOL_ENVS}"
    )
