"""
Execution record models.

One ExecutionRecord exists per admitted workflow run. Records are
created RUNNING by the launcher and resolved exactly once into a
terminal state. State transitions are validated externally (see
state.py) and applied only by the registry.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..workflow.models import TriggerType, WorkflowResult, utc_now


class ExecutionState(str, Enum):
    """
    Registry-side execution state.

    The client-only "idle" state (nothing requested yet) never appears
    in the registry; see status.IDLE_STATUS.
    """

    RUNNING = "running"  # Admitted, runner in flight
    COMPLETED = "completed"  # Runner returned a result
    FAILED = "failed"  # Runner raised


class ExecutionFailure(BaseModel):
    """Why a run failed, and where, if the runner said so."""

    model_config = ConfigDict(extra="forbid")

    message: str
    stage: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


class ExecutionRecord(BaseModel):
    """
    A single tracked workflow run.

    Invariants (enforced by ExecutionRegistry):
    - ``result`` is set only when COMPLETED, ``error`` only when FAILED
    - ``ended_at`` is set exactly when the state becomes terminal
    - state never returns to RUNNING
    """

    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str
    trigger: TriggerType = TriggerType.MANUAL

    # State
    state: ExecutionState = ExecutionState.RUNNING

    # Timing
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = None

    # Live progress, populated only by runners that publish stage events
    current_stage: Optional[str] = None
    completed_stages: List[str] = Field(default_factory=list)

    # Outcome
    result: Optional[WorkflowResult] = None
    error: Optional[ExecutionFailure] = None

    @property
    def is_terminal(self) -> bool:
        return self.state != ExecutionState.RUNNING

    def duration_seconds(self) -> Optional[float]:
        """Wall-clock run time, or None while running."""
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()
