"""
Execution launcher.

Admits workflow runs and supervises them off the request path.

Each admitted run becomes one task on a bounded worker pool. The task's
Future is the single-assignment channel for its outcome: exactly one
done-callback consumes it and performs the run's only terminal
transition. The admitting caller gets the execution ID back immediately
and never blocks on the pipeline.

Failed runs are terminal. There is no automatic retry; re-trigger with a
fresh start_execution call.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from ..workflow.base import WorkflowRunner
from ..workflow.errors import WorkflowRunnerError
from ..workflow.models import TriggerType, WorkflowResult
from .errors import ExecutionTrackingError
from .models import ExecutionFailure
from .registry import ExecutionRegistry

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def generate_execution_id() -> str:
    """Timestamp plus random suffix, e.g. ``exec_1767225600000_9f2c1ab3``."""
    return f"exec_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class _RegistryStageListener:
    """Forwards a run's stage events into its registry record."""

    def __init__(self, registry: ExecutionRegistry, execution_id: str):
        self._registry = registry
        self._execution_id = execution_id

    def stage_started(self, stage: str) -> None:
        self._registry.record_stage_started(self._execution_id, stage)

    def stage_completed(self, stage: str) -> None:
        self._registry.record_stage_completed(self._execution_id, stage)


class ExecutionLauncher:
    """
    Starts workflow runs without blocking the caller.

    Runs proceed concurrently with each other, up to ``max_workers``;
    further admissions stay RUNNING in the registry while queued for a
    worker.
    """

    def __init__(
        self,
        registry: ExecutionRegistry,
        runner: WorkflowRunner,
        max_workers: int = 4,
        id_factory: Callable[[], str] = generate_execution_id,
    ):
        """
        Initialize launcher.

        Args:
            registry: Registry that records every run
            runner: Workflow pipeline to execute
            max_workers: Maximum runs executing at once
            id_factory: Execution ID generator (must never repeat)
        """
        self.registry = registry
        self.runner = runner
        self._id_factory = id_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="workflow_run",
        )
        # execution_id -> set once the outcome is recorded
        self._settled: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def start_execution(self, trigger: TriggerType = TriggerType.MANUAL) -> str:
        """
        Admit and start a workflow run.

        Returns:
            The new execution ID. The run is RUNNING in the registry.

        Raises:
            DuplicateExecutionIdError: If the ID factory repeated itself
            RuntimeError: If the launcher has been shut down. The record
                is admitted and immediately marked FAILED.
        """
        execution_id = self._id_factory()
        self.registry.create(execution_id, trigger)

        settled = threading.Event()
        with self._lock:
            self._settled[execution_id] = settled

        listener = _RegistryStageListener(self.registry, execution_id)
        try:
            future = self._executor.submit(self.runner.execute, trigger, listener)
            future.add_done_callback(
                lambda f: self._on_run_finished(execution_id, f)
            )
        except Exception as e:
            # Pool already shut down: the admitted record must still settle
            logger.error(f"[Launcher] Could not schedule execution {execution_id}: {e}")
            self._record_failure(execution_id, str(e), None)
            with self._lock:
                self._settled.pop(execution_id, None)
            settled.set()
            raise

        logger.info(f"[Launcher] Started {trigger.value} execution {execution_id}")
        return execution_id

    def wait(self, execution_id: str, timeout: Optional[float] = None) -> bool:
        """
        Block until the run's outcome has been recorded.

        Returns:
            True if the execution is terminal, False on timeout
        """
        with self._lock:
            settled = self._settled.get(execution_id)
        if settled is not None:
            return settled.wait(timeout)

        record = self.registry.get_or_raise(execution_id)
        return record.is_terminal

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. In-flight runs finish when wait is True."""
        self._executor.shutdown(wait=wait)
        logger.info("[Launcher] Shut down")

    def _on_run_finished(self, execution_id: str, future: Future) -> None:
        """
        Record the outcome of a finished run.

        Runs on the worker thread. Nothing raised here may escape: the
        caller that admitted the run has long since returned.
        """
        try:
            if future.cancelled():
                self._record_failure(execution_id, "Execution cancelled", None)
                return

            exc = future.exception()
            if exc is not None:
                stage = exc.stage if isinstance(exc, WorkflowRunnerError) else None
                logger.error(f"[Launcher] Execution {execution_id} failed: {exc!r}")
                self._record_failure(execution_id, str(exc), stage)
                return

            result = future.result()
            if not isinstance(result, WorkflowResult):
                result = WorkflowResult.model_validate(result)
            self.registry.transition_to_completed(execution_id, result)
            logger.info(f"[Launcher] Execution {execution_id} completed")

        except ExecutionTrackingError as e:
            logger.error(f"[Launcher] Could not record outcome of {execution_id}: {e}")
        except Exception as e:
            # e.g. a runner returning something that is not a WorkflowResult
            logger.exception(f"[Launcher] Invalid outcome for {execution_id}")
            self._record_failure(execution_id, str(e), None)
        finally:
            with self._lock:
                settled = self._settled.pop(execution_id, None)
            if settled is not None:
                settled.set()

    def _record_failure(self, execution_id: str, message: str, stage: Optional[str]) -> None:
        failure = ExecutionFailure(
            message=message or UNKNOWN_ERROR_MESSAGE,
            stage=stage,
        )
        try:
            self.registry.transition_to_failed(execution_id, failure)
        except ExecutionTrackingError as e:
            logger.error(f"[Launcher] Could not record failure of {execution_id}: {e}")
