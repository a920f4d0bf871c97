"""Deposit and withdrawal orchestration around an external prover."""

from .bundle import ProofBundle
from .nargo import NargoBbProver, NargoBbSettings, render_prover_toml
from .pipeline import ProofPipeline
from .prover import CircuitArtifact, Prover, ProverContext, ProverResult
from .states import PipelineState

__all__ = [
    "CircuitArtifact",
    "NargoBbProver",
    "NargoBbSettings",
    "PipelineState",
    "ProofBundle",
    "ProofPipeline",
    "Prover",
    "ProverContext",
    "ProverResult",
    "render_prover_toml",
]
