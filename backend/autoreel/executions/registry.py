"""
In-memory execution registry.

The registry is the single source of truth for status queries and the
only shared mutable resource in the execution-tracking core.

The registry provides:
- Admission of new RUNNING records (duplicate IDs rejected)
- Retrieval by ID
- The single terminal transition per record
- Live stage progress for runners that publish it

Every operation holds one lock, and reads hand out deep copies. A reader
therefore never sees a record whose state and outcome disagree. Records
are never removed; memory grows with the number of runs for the life of
the process.
"""

import logging
import threading
from typing import Dict, List, Optional

from ..workflow.models import TriggerType, WorkflowResult, utc_now
from ..workflow.stages import TOTAL_STAGES, stage_index
from .errors import DuplicateExecutionIdError, ExecutionNotFoundError
from .models import ExecutionFailure, ExecutionRecord, ExecutionState
from .state import validate_transition

logger = logging.getLogger(__name__)


def _catalog_position(stage: str) -> int:
    """Catalog order; stages outside the catalog sort last."""
    try:
        return stage_index(stage)
    except ValueError:
        return TOTAL_STAGES


class ExecutionRegistry:
    """
    Thread-safe in-memory registry of execution records.

    Swapping this for an external store requires the same contract:
    atomic per-ID transitions visible to every reader.
    """

    def __init__(self):
        # execution_id -> ExecutionRecord
        self._records: Dict[str, ExecutionRecord] = {}
        self._lock = threading.Lock()

    def create(
        self,
        execution_id: str,
        trigger: TriggerType = TriggerType.MANUAL,
    ) -> ExecutionRecord:
        """
        Admit a new RUNNING execution.

        Raises:
            DuplicateExecutionIdError: If the ID was ever used before
        """
        with self._lock:
            if execution_id in self._records:
                raise DuplicateExecutionIdError(execution_id)

            record = ExecutionRecord(id=execution_id, trigger=trigger)
            self._records[execution_id] = record
            logger.debug(f"[Registry] Created {trigger.value} execution {execution_id}")
            return record.model_copy(deep=True)

    def get(self, execution_id: str) -> Optional[ExecutionRecord]:
        """Snapshot of an execution, or None if unknown."""
        with self._lock:
            record = self._records.get(execution_id)
            return record.model_copy(deep=True) if record is not None else None

    def get_or_raise(self, execution_id: str) -> ExecutionRecord:
        """
        Snapshot of an execution.

        Raises:
            ExecutionNotFoundError: If the execution does not exist
        """
        record = self.get(execution_id)
        if record is None:
            raise ExecutionNotFoundError(execution_id)
        return record

    def transition_to_completed(
        self,
        execution_id: str,
        result: WorkflowResult,
    ) -> ExecutionRecord:
        """
        Resolve a RUNNING execution as COMPLETED.

        Raises:
            ExecutionNotFoundError: If the execution does not exist
            InvalidTransitionError: If the execution is already terminal
        """
        with self._lock:
            record = self._require(execution_id)
            validate_transition(execution_id, record.state, ExecutionState.COMPLETED)

            record.result = result.model_copy(deep=True)
            record.current_stage = result.current_stage or record.current_stage
            record.completed_stages = list(result.completed_stages)
            self._finish(record, ExecutionState.COMPLETED)
            return record.model_copy(deep=True)

    def transition_to_failed(
        self,
        execution_id: str,
        failure: ExecutionFailure,
    ) -> ExecutionRecord:
        """
        Resolve a RUNNING execution as FAILED.

        Raises:
            ExecutionNotFoundError: If the execution does not exist
            InvalidTransitionError: If the execution is already terminal
        """
        with self._lock:
            record = self._require(execution_id)
            validate_transition(execution_id, record.state, ExecutionState.FAILED)

            record.error = failure.model_copy()
            self._finish(record, ExecutionState.FAILED)
            return record.model_copy(deep=True)

    def record_stage_started(self, execution_id: str, stage: str) -> None:
        """
        Note that a running execution entered a stage.

        Ignored once the execution is terminal; the terminal result wins.
        """
        with self._lock:
            record = self._require(execution_id)
            if record.is_terminal:
                return
            record.current_stage = stage

    def record_stage_completed(self, execution_id: str, stage: str) -> None:
        """Note that a running execution finished a stage."""
        with self._lock:
            record = self._require(execution_id)
            if record.is_terminal:
                return
            if stage not in record.completed_stages:
                record.completed_stages.append(stage)
                record.completed_stages.sort(key=_catalog_position)

    def list_executions(self) -> List[ExecutionRecord]:
        """All executions, newest first."""
        with self._lock:
            records = [r.model_copy(deep=True) for r in self._records.values()]
        records.sort(key=lambda r: r.started_at, reverse=True)
        return records

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _require(self, execution_id: str) -> ExecutionRecord:
        # Caller holds the lock
        record = self._records.get(execution_id)
        if record is None:
            raise ExecutionNotFoundError(execution_id)
        return record

    def _finish(self, record: ExecutionRecord, state: ExecutionState) -> None:
        # Caller holds the lock
        ended_at = utc_now()
        if ended_at < record.started_at:
            ended_at = record.started_at
        record.ended_at = ended_at
        record.state = state
        logger.info(
            f"[Registry] Execution {record.id} -> {state.value} "
            f"after {record.duration_seconds():.1f}s"
        )
