"""
Proof pipeline orchestration.

Drives one deposit or withdrawal from inputs to a proof bundle:

1. **Commitment**: validate inputs, draw the note secrets, hash the commitment.
2. **Insertion**: append the commitment to the tree (deposits only).
3. **Witness**: extract the Merkle path and build the circuit inputs.
4. **Proof**: hand the witness to the external prover and wait.

Tree mutation is synchronous and finishes before the prover is awaited, so
the tree lock is never held across an `await`. A failure or cancellation
after insertion does not remove the leaf: the deposit stays in the tree
and `prove_leaf` retries proof generation for the same index.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from shadow_pool.subspecs import metrics
from shadow_pool.types import ExternalProverError, LeafNotFound

from ..bn254.field import Fr
from ..commitment.encoding import recipient_to_field
from ..commitment.scheme import CommitmentScheme, DepositNote
from ..merkle.tree import IncrementalMerkleTree
from ..witness.assembler import Witness, WitnessAssembler
from .bundle import ProofBundle
from .prover import ProverContext, ProverResult
from .states import PipelineState

logger = logging.getLogger(__name__)


@dataclass
class ProofPipeline:
    """
    Runs deposit and withdrawal flows against a shared tree.

    A pipeline tracks the state of one run at a time. Concurrent runs use
    one pipeline each; they may share the same tree, which serializes
    insertions itself.
    """

    tree: IncrementalMerkleTree
    """The shared commitment tree."""

    context: ProverContext
    """Circuit artifact and prover handle, owned by the caller."""

    scheme: CommitmentScheme = field(default_factory=CommitmentScheme)
    """Commitment scheme. Must use the same hasher as the tree and the circuit."""

    _state: PipelineState = field(default=PipelineState.IDLE)
    """Current pipeline state."""

    _assembler: WitnessAssembler = field(init=False)
    """Witness assembler bound to `scheme`."""

    _note: DepositNote | None = field(default=None)
    """Note of the most recent deposit run."""

    def __post_init__(self) -> None:
        """Bind the witness assembler to the commitment scheme."""
        self._assembler = WitnessAssembler(self.scheme)

    @property
    def state(self) -> PipelineState:
        """Current pipeline state."""
        return self._state

    @property
    def note(self) -> DepositNote | None:
        """
        The note of the most recent deposit run.

        Set as soon as the note is generated, so it survives a later
        prover failure and can be passed to `prove_leaf`.
        """
        return self._note

    def reset(self) -> None:
        """Return to IDLE after a completed or failed run."""
        if self._state.is_running:
            raise ValueError(f"Cannot reset while in state {self._state.name}")
        self._state = PipelineState.IDLE

    def _transition_to(self, new_state: PipelineState) -> None:
        """
        Transition to a new pipeline state.

        Raises:
            ValueError: If transition is not allowed.
        """
        if not self._state.can_transition_to(new_state):
            raise ValueError(f"Invalid state transition: {self._state.name} -> {new_state.name}")

        logger.debug("Pipeline %s -> %s", self._state.name, new_state.name)
        self._state = new_state

    @contextmanager
    def _tracking_failures(self) -> Iterator[None]:
        """Move to ERROR when the body raises, then re-raise."""
        try:
            yield
        except asyncio.CancelledError:
            logger.warning("Pipeline cancelled in state %s", self._state.name)
            self._state = PipelineState.ERROR
            raise
        except Exception as exc:
            stage = self._state.name.lower()
            logger.warning("Pipeline failed in state %s: %s", self._state.name, exc)
            metrics.pipeline_failures.labels(stage=stage).inc()
            self._state = PipelineState.ERROR
            raise

    # -----------------------------------------------------------------
    # Flows
    # -----------------------------------------------------------------

    async def deposit_flow(
        self,
        token: str,
        amount: int | str,
        recipient: str | Fr,
        existing_leaves: Iterable[Fr] | None = None,
    ) -> ProofBundle:
        """
        Create a note, insert its commitment and prove membership.

        Args:
            token: Token address (zero address for native ETH).
            amount: Amount in base units.
            recipient: Address bound into the proof.
            existing_leaves: When given, the ordered leaf log to rehydrate a
                private tree from; the shared tree is then left untouched.

        Raises:
            EncodingError: If the token, amount or recipient is malformed.
                Nothing is inserted.
            RandomnessError: If the secure source fails. Nothing is inserted.
            CapacityExceeded: If the tree is full.
            ExternalProverError: If proof generation fails. The leaf stays
                in the tree; `leaf_index` on the error locates it.
        """
        self._transition_to(PipelineState.GENERATING_COMMITMENT)

        with self._tracking_failures():
            recipient_fr = recipient_to_field(recipient, self.scheme.config)
            note = self.scheme.generate_deposit(token, amount)
            self._note = note

            self._transition_to(PipelineState.INSERTING_LEAF)
            tree = self.tree if existing_leaves is None else self._rehydrate(existing_leaves)
            leaf_index = tree.insert(note.commitment)
            metrics.deposits.inc()
            if tree is self.tree:
                metrics.tree_leaves.set(tree.leaf_count)

            self._transition_to(PipelineState.ASSEMBLING_WITNESS)
            bundle = await self._prove(
                note.nullifier, note.secret, recipient_fr, tree, leaf_index, note.commitment
            )

        logger.info("Deposit proven at leaf %d", leaf_index)
        return bundle

    async def prove_leaf(
        self,
        nullifier: Fr,
        secret: Fr,
        recipient: str | Fr,
        leaf_index: int,
        commitment: Fr,
        tree: IncrementalMerkleTree | None = None,
    ) -> ProofBundle:
        """
        Prove membership of an already inserted leaf.

        This is the retry path after an `ExternalProverError`.

        Raises:
            LeafNotFound: If the index is not in the tree, or holds a
                different commitment.
            ExternalProverError: If proof generation fails again.
        """
        self._transition_to(PipelineState.ASSEMBLING_WITNESS)

        with self._tracking_failures():
            bundle = await self._prove(
                nullifier,
                secret,
                recipient,
                tree if tree is not None else self.tree,
                leaf_index,
                commitment,
            )

        logger.info("Leaf %d proven", leaf_index)
        return bundle

    async def withdraw_flow(
        self,
        nullifier: Fr,
        secret: Fr,
        token: str,
        amount: int | str,
        recipient: str | Fr,
    ) -> ProofBundle:
        """
        Re-derive a note's commitment, locate it and prove membership.

        Raises:
            EncodingError: If the token, amount or recipient is malformed.
            LeafNotFound: If no leaf holds the commitment.
            ExternalProverError: If proof generation fails.
        """
        self._transition_to(PipelineState.GENERATING_COMMITMENT)

        with self._tracking_failures():
            recipient_fr = recipient_to_field(recipient, self.scheme.config)
            commitment = self.scheme.derive_commitment(nullifier, secret, token, amount)

            leaf_index = self.tree.index_of(commitment)
            if leaf_index is None:
                raise LeafNotFound(None, self.tree.leaf_count, detail="no deposit for this note")

            self._transition_to(PipelineState.ASSEMBLING_WITNESS)
            bundle = await self._prove(
                nullifier, secret, recipient_fr, self.tree, leaf_index, commitment
            )

        logger.info("Withdrawal proven for leaf %d", leaf_index)
        return bundle

    # -----------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------

    def _rehydrate(self, leaves: Iterable[Fr]) -> IncrementalMerkleTree:
        """Replay a leaf log into a fresh tree shaped like the shared one."""
        return IncrementalMerkleTree.replay(
            leaves, self.tree.depth, self.tree.zero_values, self.tree.hasher
        )

    async def _prove(
        self,
        nullifier: Fr,
        secret: Fr,
        recipient: str | Fr,
        tree: IncrementalMerkleTree,
        leaf_index: int,
        commitment: Fr,
    ) -> ProofBundle:
        """Assemble the witness and await the prover. Entered in ASSEMBLING_WITNESS."""
        witness = self._assembler.assemble(nullifier, secret, recipient, tree, leaf_index)

        if witness.commitment != commitment:
            raise LeafNotFound(
                None, tree.leaf_count, detail=f"leaf {leaf_index} holds a different commitment"
            )

        self._transition_to(PipelineState.AWAITING_EXTERNAL_PROOF)
        result = await self._generate(witness)

        self._transition_to(PipelineState.COMPLETE)
        return ProofBundle(
            commitment=witness.commitment,
            nullifier=nullifier,
            secret=secret,
            proof=result.proof,
            public_inputs=result.public_inputs,
            merkle_root=witness.root,
            nullifier_hash=witness.nullifier_hash,
            leaf_index=leaf_index,
        )

    async def _generate(self, witness: Witness) -> ProverResult:
        """
        Await the external prover.

        Any failure, including a missing result, surfaces as
        `ExternalProverError` carrying the leaf index.
        """
        prover = self.context.prover
        try:
            with metrics.proof_generation_time.time():
                result = await prover.generate_proof(witness, self.context.circuit)
        except ExternalProverError as exc:
            if exc.leaf_index is not None:
                raise
            raise ExternalProverError(exc.message, leaf_index=witness.leaf_index) from exc
        except Exception as exc:
            raise ExternalProverError(
                f"Prover failed: {exc!r}", leaf_index=witness.leaf_index
            ) from exc

        if result is None:
            raise ExternalProverError("Prover returned no proof", leaf_index=witness.leaf_index)

        return result
