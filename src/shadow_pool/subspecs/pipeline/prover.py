"""The external prover boundary and the context that carries it."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shadow_pool.types import ConfigError, StrictBaseModel

from ..bn254.field import Fr
from ..witness.assembler import Witness


class CircuitArtifact(BaseModel):
    """
    A compiled Noir circuit, as written by `nargo compile`.

    Only the fields the backends read are typed. Everything else in the
    artifact (debug symbols, file map) is kept so that the artifact can be
    written back out unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    bytecode: str
    """Base64 ACIR bytecode."""

    abi: dict[str, Any]
    """Parameter and return-value layout of the circuit."""

    noir_version: str | None = None

    @field_validator("bytecode")
    @classmethod
    def check_bytecode(cls, value: str) -> str:
        """Reject placeholder artifacts that carry no circuit."""
        if value in ("", "0x"):
            raise ValueError("artifact has no bytecode")
        return value

    @classmethod
    def load(cls, path: str | Path) -> "CircuitArtifact":
        """
        Read a compiled circuit from disk.

        Raises:
            ConfigError: If the file is missing, unreadable, or not a circuit.
        """
        path = Path(path)
        try:
            raw = path.read_text()
        except OSError as exc:
            raise ConfigError(f"Cannot read circuit artifact {path}: {exc}") from exc

        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise ConfigError(
                f"Malformed circuit artifact {path}: {exc.error_count()} validation errors"
            ) from exc


class ProverResult(StrictBaseModel):
    """A proof and the public inputs it commits to."""

    proof: bytes = Field(min_length=1)
    public_inputs: List[Fr]


class Prover(Protocol):
    """An external proving service. Opaque to the core."""

    async def generate_proof(self, witness: Witness, circuit: CircuitArtifact) -> ProverResult:
        """Produce a proof that `witness` satisfies `circuit`."""
        ...


@dataclass(frozen=True, slots=True)
class ProverContext:
    """
    Everything needed to reach the prover.

    Owned by the caller and passed into the pipeline, so that several
    pipelines with different circuits or backends can coexist.
    """

    circuit: CircuitArtifact
    prover: Prover
