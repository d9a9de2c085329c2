"""
Execution Registry Tests

QC: Verify the registry enforces:
1. Unique IDs over its lifetime
2. Exactly one terminal transition per execution
3. Result/error exclusivity
4. Snapshot reads (callers cannot mutate registry state)
5. Atomic transitions under concurrent writers
"""

import threading

import pytest

from autoreel.executions.errors import (
    DuplicateExecutionIdError,
    ExecutionNotFoundError,
    InvalidTransitionError,
)
from autoreel.executions.models import ExecutionFailure, ExecutionState
from autoreel.executions.state import can_transition, is_terminal
from autoreel.workflow.models import TriggerType

from conftest import make_result


class TestAdmission:

    def test_create_registers_running_record(self, registry):
        record = registry.create("exec_1", TriggerType.SCHEDULED)

        assert record.id == "exec_1"
        assert record.state == ExecutionState.RUNNING
        assert record.trigger == TriggerType.SCHEDULED
        assert record.result is None
        assert record.error is None
        assert record.ended_at is None
        assert registry.count() == 1

    def test_duplicate_id_rejected(self, registry):
        registry.create("exec_1")

        with pytest.raises(DuplicateExecutionIdError) as exc_info:
            registry.create("exec_1")

        assert exc_info.value.code == "DuplicateId"
        assert registry.count() == 1

    def test_duplicate_id_rejected_after_terminal(self, registry):
        """IDs are never reused, even once the execution has finished."""
        registry.create("exec_1")
        registry.transition_to_completed("exec_1", make_result())

        with pytest.raises(DuplicateExecutionIdError):
            registry.create("exec_1")


class TestLookup:

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("nope") is None

    def test_get_or_raise_unknown(self, registry):
        with pytest.raises(ExecutionNotFoundError) as exc_info:
            registry.get_or_raise("nope")
        assert exc_info.value.code == "NotFound"

    def test_reads_are_snapshots(self, registry):
        registry.create("exec_1")

        snapshot = registry.get("exec_1")
        snapshot.state = ExecutionState.FAILED
        snapshot.completed_stages.append("upload")

        fresh = registry.get("exec_1")
        assert fresh.state == ExecutionState.RUNNING
        assert fresh.completed_stages == []

    def test_list_newest_first(self, registry):
        registry.create("exec_a")
        registry.create("exec_b")
        registry.create("exec_c")

        ids = [r.id for r in registry.list_executions()]
        assert sorted(ids) == ["exec_a", "exec_b", "exec_c"]
        started = [r.started_at for r in registry.list_executions()]
        assert started == sorted(started, reverse=True)


class TestTerminalTransitions:

    def test_complete(self, registry):
        registry.create("exec_1")
        record = registry.transition_to_completed("exec_1", make_result(7))

        assert record.state == ExecutionState.COMPLETED
        assert record.result is not None
        assert record.error is None
        assert record.ended_at >= record.started_at
        assert record.completed_stages == record.result.completed_stages

    def test_fail(self, registry):
        registry.create("exec_1")
        record = registry.transition_to_failed(
            "exec_1", ExecutionFailure(message="render timeout")
        )

        assert record.state == ExecutionState.FAILED
        assert record.error.message == "render timeout"
        assert record.result is None
        assert record.ended_at >= record.started_at

    @pytest.mark.parametrize("first", ["complete", "fail"])
    @pytest.mark.parametrize("second", ["complete", "fail"])
    def test_second_transition_rejected(self, registry, first, second):
        """
        GIVEN: A terminal execution
        WHEN: Any further transition is attempted
        THEN: InvalidTransitionError, and the record is unchanged
        """
        apply = {
            "complete": lambda: registry.transition_to_completed("exec_1", make_result()),
            "fail": lambda: registry.transition_to_failed(
                "exec_1", ExecutionFailure(message="boom")
            ),
        }
        registry.create("exec_1")
        apply[first]()
        before = registry.get("exec_1")

        with pytest.raises(InvalidTransitionError) as exc_info:
            apply[second]()

        assert exc_info.value.code == "InvalidTransition"
        assert registry.get("exec_1") == before

    def test_transition_unknown_id(self, registry):
        with pytest.raises(ExecutionNotFoundError):
            registry.transition_to_completed("nope", make_result())
        with pytest.raises(ExecutionNotFoundError):
            registry.transition_to_failed("nope", ExecutionFailure(message="x"))

    def test_concurrent_transitions_only_one_wins(self, registry):
        registry.create("exec_1")
        barrier = threading.Barrier(8)
        outcomes = []
        outcomes_lock = threading.Lock()

        def attempt(i):
            barrier.wait()
            try:
                if i % 2:
                    registry.transition_to_completed("exec_1", make_result())
                else:
                    registry.transition_to_failed("exec_1", ExecutionFailure(message="x"))
                outcome = "ok"
            except InvalidTransitionError:
                outcome = "rejected"
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("rejected") == 7

        record = registry.get("exec_1")
        # Exactly one of result/error
        assert (record.result is None) != (record.error is None)


class TestStageProgress:

    def test_stage_events_update_running_record(self, registry):
        registry.create("exec_1")
        registry.record_stage_started("exec_1", "trend_research")
        registry.record_stage_completed("exec_1", "trend_research")
        registry.record_stage_started("exec_1", "topic_selection")

        record = registry.get("exec_1")
        assert record.current_stage == "topic_selection"
        assert record.completed_stages == ["trend_research"]

    def test_repeated_stage_completion_recorded_once(self, registry):
        registry.create("exec_1")
        registry.record_stage_completed("exec_1", "voiceover")
        registry.record_stage_completed("exec_1", "voiceover")

        assert registry.get("exec_1").completed_stages == ["voiceover"]

    def test_completed_stages_kept_in_catalog_order(self, registry):
        """
        GIVEN: Stage completions reported out of pipeline order
        WHEN: The record is read
        THEN: completed_stages follows the catalog, unknown stages last
        """
        registry.create("exec_1")
        for stage in ("custom_step", "voiceover", "trend_research", "script_review"):
            registry.record_stage_completed("exec_1", stage)

        assert registry.get("exec_1").completed_stages == [
            "trend_research",
            "script_review",
            "voiceover",
            "custom_step",
        ]

    def test_stage_events_ignored_after_terminal(self, registry):
        registry.create("exec_1")
        registry.transition_to_failed("exec_1", ExecutionFailure(message="x"))

        registry.record_stage_started("exec_1", "upload")
        registry.record_stage_completed("exec_1", "upload")

        record = registry.get("exec_1")
        assert record.current_stage is None
        assert record.completed_stages == []


class TestStateRules:

    def test_terminal_states(self):
        assert not is_terminal(ExecutionState.RUNNING)
        assert is_terminal(ExecutionState.COMPLETED)
        assert is_terminal(ExecutionState.FAILED)

    def test_no_transition_back_to_running(self):
        assert not can_transition(ExecutionState.COMPLETED, ExecutionState.RUNNING)
        assert not can_transition(ExecutionState.FAILED, ExecutionState.RUNNING)
        assert not can_transition(ExecutionState.COMPLETED, ExecutionState.COMPLETED)
        assert can_transition(ExecutionState.RUNNING, ExecutionState.COMPLETED)
        assert can_transition(ExecutionState.RUNNING, ExecutionState.FAILED)
