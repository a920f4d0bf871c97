"""
A prover backed by the Noir toolchain.

Proving takes two external steps:

1.  `nargo execute` solves the circuit for the inputs in `Prover.toml` and
    writes the compressed witness to `target/<witness_name>.gz`.
2.  `bb prove` turns the circuit bytecode and that witness into a proof,
    writing `proof` and `public_inputs` into an output directory.

Both run as asyncio subprocesses, so awaiting a proof never blocks the
event loop.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict

from shadow_pool.types import ExternalProverError

from ..bn254.field import Fr
from ..witness.assembler import Witness
from .prover import CircuitArtifact, ProverResult

logger = logging.getLogger(__name__)


class NargoBbSettings(BaseModel):
    """Where the toolchain and the circuit project live."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_dir: Path
    """The Noir project containing `Nargo.toml`."""

    witness_name: str = "witness"
    """Stem of the witness file `nargo execute` writes under `target/`."""

    nargo_binary: str = "nargo"
    bb_binary: str = "bb"

    oracle_hash: str = "keccak"
    """Transcript hash; `keccak` produces proofs the Solidity verifier accepts."""


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    return f'"{value}"'


def render_prover_toml(inputs: dict[str, Any]) -> str:
    """Render circuit inputs in the `Prover.toml` format `nargo execute` reads."""
    return "".join(f"{name} = {_toml_value(value)}\n" for name, value in inputs.items())


class NargoBbProver:
    """
    Runs `nargo execute` and `bb prove` for each witness.

    `Prover.toml` and the witness file are fixed paths in the project
    directory, so proofs are generated one at a time.
    """

    def __init__(self, settings: NargoBbSettings):
        self.settings = settings
        self._lock = asyncio.Lock()

    async def _run(self, args: Sequence[str], cwd: Path) -> None:
        logger.debug("Running %s in %s", " ".join(args), cwd)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ExternalProverError(f"Cannot start {args[0]}: {exc}") from exc

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise ExternalProverError(
                f"{args[0]} {args[1]} exited with status {proc.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

    async def generate_proof(self, witness: Witness, circuit: CircuitArtifact) -> ProverResult:
        """
        Prove `witness` against `circuit`.

        Raises:
            ExternalProverError: If a tool fails to start, exits non-zero,
                or does not produce its outputs.
        """
        async with self._lock:
            return await self._generate(witness, circuit)

    async def _generate(self, witness: Witness, circuit: CircuitArtifact) -> ProverResult:
        settings = self.settings
        project_dir = settings.project_dir

        (project_dir / "Prover.toml").write_text(render_prover_toml(witness.to_circuit_inputs()))
        await self._run([settings.nargo_binary, "execute", settings.witness_name], project_dir)

        witness_file = project_dir / "target" / f"{settings.witness_name}.gz"

        with tempfile.TemporaryDirectory(prefix="shadow_pool_") as tmp:
            out_dir = Path(tmp)
            bytecode_file = out_dir / "circuit.json"
            bytecode_file.write_text(circuit.model_dump_json())

            await self._run(
                [
                    settings.bb_binary,
                    "prove",
                    "-b",
                    str(bytecode_file),
                    "-w",
                    str(witness_file),
                    "-o",
                    str(out_dir),
                    "--oracle_hash",
                    settings.oracle_hash,
                ],
                project_dir,
            )

            try:
                proof = (out_dir / "proof").read_bytes()
                public_inputs = (out_dir / "public_inputs").read_bytes()
            except OSError as exc:
                raise ExternalProverError(f"bb did not write its outputs: {exc}") from exc

        try:
            return ProverResult(proof=proof, public_inputs=Fr.deserialize_list(public_inputs))
        except ValueError as exc:
            raise ExternalProverError(f"bb produced malformed outputs: {exc}") from exc
