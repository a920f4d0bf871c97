"""Proof pipeline state machine."""

from __future__ import annotations

from enum import Enum, auto


class PipelineState(Enum):
    """
    Stages of a single deposit or proof run.

    State Machine Diagram
    ---------------------
    ::

        IDLE --> GENERATING_COMMITMENT --> INSERTING_LEAF --> ASSEMBLING_WITNESS
                          |                      |                  |
                          |                      |                  v
                          +----------------------+------> AWAITING_EXTERNAL_PROOF --> COMPLETE
                          |                      |                  |
                          +----------------------+------------------+--> ERROR

    A withdrawal skips INSERTING_LEAF: the commitment is re-derived and
    located in the tree instead. A retry against an already inserted leaf
    starts directly at ASSEMBLING_WITNESS.

    COMPLETE and ERROR are terminal for a run. A new run may start from
    either of them, or from IDLE.
    """

    IDLE = auto()
    """No run has started."""

    GENERATING_COMMITMENT = auto()
    """Validating inputs, drawing the note secrets and hashing the commitment."""

    INSERTING_LEAF = auto()
    """Appending the commitment to the tree."""

    ASSEMBLING_WITNESS = auto()
    """Extracting the Merkle path and building the circuit inputs."""

    AWAITING_EXTERNAL_PROOF = auto()
    """
    Waiting on the external prover.

    The leaf is already in the tree. A failure from here on keeps it there,
    and the caller may retry proof generation for the same index.
    """

    COMPLETE = auto()
    """A proof bundle was produced."""

    ERROR = auto()
    """The run failed. The typed error was raised to the caller."""

    def can_transition_to(self, target: "PipelineState") -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target: The proposed target state.

        Returns:
            True if the transition is allowed by the state machine rules.
        """
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_running(self) -> bool:
        """Whether a run is in progress."""
        return self not in {PipelineState.IDLE, PipelineState.COMPLETE, PipelineState.ERROR}


_RUN_ENTRY: set[PipelineState] = {
    PipelineState.GENERATING_COMMITMENT,
    PipelineState.ASSEMBLING_WITNESS,
}

_VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.IDLE: _RUN_ENTRY,
    PipelineState.GENERATING_COMMITMENT: {
        PipelineState.INSERTING_LEAF,
        PipelineState.ASSEMBLING_WITNESS,
        PipelineState.ERROR,
    },
    PipelineState.INSERTING_LEAF: {PipelineState.ASSEMBLING_WITNESS, PipelineState.ERROR},
    PipelineState.ASSEMBLING_WITNESS: {
        PipelineState.AWAITING_EXTERNAL_PROOF,
        PipelineState.ERROR,
    },
    PipelineState.AWAITING_EXTERNAL_PROOF: {PipelineState.COMPLETE, PipelineState.ERROR},
    PipelineState.COMPLETE: _RUN_ENTRY | {PipelineState.IDLE},
    PipelineState.ERROR: _RUN_ENTRY | {PipelineState.IDLE},
}
"""Valid state transitions for the pipeline state machine."""
