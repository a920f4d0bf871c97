"""Prometheus metrics for the shadow pool core."""

from .registry import (
    REGISTRY,
    deposits,
    generate_metrics,
    pipeline_failures,
    proof_generation_time,
    tree_leaves,
)

__all__ = [
    "REGISTRY",
    "deposits",
    "generate_metrics",
    "pipeline_failures",
    "proof_generation_time",
    "tree_leaves",
]
