"""
Workflow runner abstraction.

The workflow runner is the pipeline that actually produces a video. The
execution-tracking core only ever calls it through this interface: one
blocking "run to completion" call per trigger type, returning a
WorkflowResult or raising.

Runners may publish stage transitions through an optional StageListener.
Listeners are advisory: a runner that never calls them is still valid,
and listener failures must not fail the run.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .errors import WorkflowRunnerError
from .models import (
    CostSummary,
    QualitySummary,
    StageError,
    TriggerType,
    VideoArtifact,
    WorkflowResult,
)
from .stages import STAGE_CATALOG, is_known_stage

logger = logging.getLogger(__name__)


class StageListener(Protocol):
    """Receives stage transitions from a running workflow."""

    def stage_started(self, stage: str) -> None: ...

    def stage_completed(self, stage: str) -> None: ...


class WorkflowRunner(ABC):
    """
    Abstract base class for workflow runners.

    All runners must implement:
    - execute_manual: Run the pipeline for an operator-initiated trigger
    - execute_scheduled: Run the pipeline for a cron firing

    Both calls block until the pipeline finishes. The caller is
    responsible for running them off the request path.
    """

    @abstractmethod
    def execute_manual(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        pass

    @abstractmethod
    def execute_scheduled(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        pass

    def execute(
        self,
        trigger: TriggerType,
        listener: Optional[StageListener] = None,
    ) -> WorkflowResult:
        """Dispatch to the entry point matching the trigger type."""
        if trigger == TriggerType.SCHEDULED:
            return self.execute_scheduled(listener=listener)
        return self.execute_manual(listener=listener)


@dataclass
class StageContext:
    """
    Mutable state threaded through the stages of one run.

    Stage handlers read earlier stages' outputs from ``outputs`` and
    record spend, scores, the final video and recoverable errors here.
    """

    trigger: TriggerType
    outputs: Dict[str, Any] = field(default_factory=dict)
    costs: CostSummary = field(default_factory=CostSummary)
    quality: Optional[QualitySummary] = None
    video: Optional[VideoArtifact] = None
    errors: List[StageError] = field(default_factory=list)

    def add_cost(self, category: str, amount: float) -> None:
        self.costs.add(category, amount)

    def record_error(self, stage: str, message: str) -> None:
        """Record a recoverable error; the run continues."""
        self.errors.append(StageError(node=stage, error=message))


StageHandler = Callable[[StageContext], Any]


class StagedWorkflowRunner(WorkflowRunner):
    """
    Runner that drives registered stage handlers in catalog order.

    Each handler receives the shared StageContext; its return value is
    stored in ``context.outputs[stage]``. A handler that raises fails the
    whole run with a WorkflowRunnerError naming the stage. Stages with no
    registered handler are skipped.
    """

    def __init__(self, handlers: Dict[str, StageHandler]):
        unknown = [name for name in handlers if not is_known_stage(name)]
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(sorted(unknown))}")
        self._handlers = dict(handlers)

    @property
    def stages(self) -> List[str]:
        """Stages this runner will execute, in catalog order."""
        return [stage for stage in STAGE_CATALOG if stage in self._handlers]

    def execute_manual(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        return self._run(TriggerType.MANUAL, listener)

    def execute_scheduled(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        return self._run(TriggerType.SCHEDULED, listener)

    def _run(self, trigger: TriggerType, listener: Optional[StageListener]) -> WorkflowResult:
        context = StageContext(trigger=trigger)
        completed: List[str] = []
        current = ""

        logger.info(f"[Workflow] Starting {trigger.value} run over {len(self.stages)} stage(s)")

        for stage in self.stages:
            current = stage
            _notify(listener, "stage_started", stage)
            try:
                context.outputs[stage] = self._handlers[stage](context)
            except WorkflowRunnerError as e:
                if e.stage is None:
                    e.stage = stage
                logger.error(f"[Workflow] Stage {stage} failed: {e}")
                raise
            except Exception as e:
                logger.exception(f"[Workflow] Stage {stage} raised")
                raise WorkflowRunnerError(str(e) or type(e).__name__, stage=stage) from e

            completed.append(stage)
            _notify(listener, "stage_completed", stage)

        logger.info(
            f"[Workflow] Finished {trigger.value} run: {len(completed)} stage(s), "
            f"cost ${context.costs.total:.2f}, {len(context.errors)} recoverable error(s)"
        )

        return WorkflowResult(
            status="completed",
            current_stage=current,
            completed_stages=completed,
            costs=context.costs,
            quality=context.quality,
            video=context.video,
            errors=context.errors,
        )


def _notify(listener: Optional[StageListener], event: str, stage: str) -> None:
    if listener is None:
        return
    try:
        getattr(listener, event)(stage)
    except Exception:
        # Progress publication is advisory
        logger.warning(f"[Workflow] Stage listener {event} failed for {stage}", exc_info=True)
