"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the commitment tree and the proof pipeline.
Callers expose them in Prometheus text format with `generate_metrics()`.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for shadow pool metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Commitment Tree
# -----------------------------------------------------------------------------

tree_leaves = Gauge(
    "shadow_pool_tree_leaves",
    "Leaves in the most recently updated commitment tree",
    registry=REGISTRY,
)

deposits = Counter(
    "shadow_pool_deposits_total",
    "Deposit commitments inserted by the pipeline",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Proof Pipeline
# -----------------------------------------------------------------------------

pipeline_failures = Counter(
    "shadow_pool_pipeline_failures_total",
    "Pipeline runs that ended in the ERROR state",
    labelnames=["stage"],
    registry=REGISTRY,
)

proof_generation_time = Histogram(
    "shadow_pool_proof_generation_seconds",
    "External proof generation duration",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
