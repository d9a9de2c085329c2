"""
Status resolution for polling clients.

Turns a registry snapshot into the normalized StatusView the front end
polls until the run is terminal.

Running executions get a conservative placeholder: the runner's inner
progress is not observable unless it publishes stage events, so the
view reports a fixed low percentage and a generic "processing" stage
rather than inventing precision. When stage events are available the
view reflects them, never reaching 100 before the terminal result.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..workflow.models import (
    CamelModel,
    CostSummary,
    QualitySummary,
    StageError,
    VideoArtifact,
)
from ..workflow.stages import TOTAL_STAGES, compute_progress
from .errors import MissingExecutionIdError
from .models import ExecutionRecord, ExecutionState
from .registry import ExecutionRegistry

IDLE_STATUS = "idle"

RUNNING_PLACEHOLDER_PROGRESS = 25
RUNNING_PLACEHOLDER_STAGE = "processing"
RUNNING_PROGRESS_CEILING = 99
UNKNOWN_STAGE = "unknown"


class StatusView(CamelModel):
    """Normalized progress view for one execution."""

    id: str
    status: str
    current_node: str = ""
    completed_nodes: List[str] = Field(default_factory=list)
    progress: int = 0
    video_project: Optional[VideoArtifact] = None
    costs: Optional[CostSummary] = None
    quality: Optional[QualitySummary] = None
    errors: List[StageError] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class StatusResolver:
    """Answers status queries from registry snapshots. Never blocks on a run."""

    def __init__(self, registry: ExecutionRegistry, total_stages: int = TOTAL_STAGES):
        self.registry = registry
        self.total_stages = total_stages

    def resolve_status(self, execution_id: Optional[str]) -> StatusView:
        """
        Build the status view for an execution.

        Raises:
            MissingExecutionIdError: If no ID was supplied
            ExecutionNotFoundError: If the ID is unknown
        """
        if execution_id is None or not execution_id.strip():
            raise MissingExecutionIdError()

        record = self.registry.get_or_raise(execution_id)

        if record.state == ExecutionState.COMPLETED:
            return self._completed_view(record)
        if record.state == ExecutionState.FAILED:
            return self._failed_view(record)
        return self._running_view(record)

    def _running_view(self, record: ExecutionRecord) -> StatusView:
        progress = RUNNING_PLACEHOLDER_PROGRESS
        if record.completed_stages:
            progress = max(
                progress,
                compute_progress(record.completed_stages, self.total_stages),
            )
            progress = min(progress, RUNNING_PROGRESS_CEILING)

        return StatusView(
            id=record.id,
            status=ExecutionState.RUNNING.value,
            current_node=record.current_stage or RUNNING_PLACEHOLDER_STAGE,
            completed_nodes=list(record.completed_stages),
            progress=progress,
            costs=CostSummary(total=0),
            started_at=record.started_at,
        )

    def _completed_view(self, record: ExecutionRecord) -> StatusView:
        result = record.result
        return StatusView(
            id=record.id,
            status=ExecutionState.COMPLETED.value,
            current_node=result.current_stage,
            completed_nodes=list(result.completed_stages),
            progress=compute_progress(result.completed_stages, self.total_stages),
            video_project=result.video,
            costs=result.costs,
            quality=result.quality,
            errors=list(result.errors),
            started_at=record.started_at,
            ended_at=record.ended_at,
        )

    def _failed_view(self, record: ExecutionRecord) -> StatusView:
        failure = record.error
        return StatusView(
            id=record.id,
            status=ExecutionState.FAILED.value,
            current_node="",
            completed_nodes=[],
            progress=0,
            errors=[
                StageError(
                    node=failure.stage or UNKNOWN_STAGE,
                    error=failure.message,
                    timestamp=failure.timestamp,
                )
            ],
            started_at=record.started_at,
            ended_at=record.ended_at,
        )
