"""
Shared fixtures for execution-tracking tests.

GatedRunner blocks each run until the test releases it, so the RUNNING
window and the terminal transition are both observable without sleeps.
"""

import threading
from typing import List, Optional

import pytest

from autoreel.executions.launcher import ExecutionLauncher
from autoreel.executions.registry import ExecutionRegistry
from autoreel.executions.status import StatusResolver
from autoreel.workflow.base import StageListener, WorkflowRunner
from autoreel.workflow.models import (
    CostSummary,
    QualitySummary,
    TriggerType,
    VideoArtifact,
    WorkflowResult,
)
from autoreel.workflow.stages import STAGE_CATALOG


WAIT_TIMEOUT = 5.0


def make_result(completed: int = len(STAGE_CATALOG)) -> WorkflowResult:
    """A realistic runner result with the first ``completed`` stages done."""
    stages = list(STAGE_CATALOG[:completed])
    return WorkflowResult(
        status="completed",
        current_stage=stages[-1] if stages else "",
        completed_stages=stages,
        costs=CostSummary(total=1.85, breakdown={"llm": 0.45, "voice": 0.9, "render": 0.5}),
        quality=QualitySummary(scores={"script": 8.5, "visuals": 7.0}, overall=7.8),
        video=VideoArtifact(url="https://youtu.be/abc123", duration_seconds=58.0, title="Daily Short"),
    )


class GatedRunner(WorkflowRunner):
    """
    Fake runner that waits for release() before finishing.

    Finishes with ``result`` unless ``error`` is set, in which case it
    raises ``error``. ``gated=False`` lets runs finish immediately.
    """

    def __init__(
        self,
        result: Optional[WorkflowResult] = None,
        error: Optional[BaseException] = None,
        gated: bool = True,
        stages: Optional[List[str]] = None,
    ):
        self.result = result if result is not None else make_result()
        self.error = error
        self.stages = stages or []
        self.calls: List[TriggerType] = []
        self._release = threading.Event()
        self._calls_lock = threading.Lock()
        if not gated:
            self._release.set()

    def release(self) -> None:
        self._release.set()

    def execute_manual(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        return self._run(TriggerType.MANUAL, listener)

    def execute_scheduled(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        return self._run(TriggerType.SCHEDULED, listener)

    def _run(self, trigger: TriggerType, listener: Optional[StageListener]) -> WorkflowResult:
        with self._calls_lock:
            self.calls.append(trigger)
        for stage in self.stages:
            if listener is not None:
                listener.stage_started(stage)
                listener.stage_completed(stage)
        if not self._release.wait(WAIT_TIMEOUT):
            raise TimeoutError("GatedRunner was never released")
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def registry():
    return ExecutionRegistry()


@pytest.fixture
def resolver(registry):
    return StatusResolver(registry)


@pytest.fixture
def runner():
    return GatedRunner()


@pytest.fixture
def launcher(registry, runner):
    launcher = ExecutionLauncher(registry=registry, runner=runner, max_workers=4)
    yield launcher
    runner.release()
    launcher.shutdown(wait=True)
