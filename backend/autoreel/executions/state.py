"""
State transition validation for executions.

Execution lifecycle: RUNNING → COMPLETED | FAILED

INVARIANT: Terminal states are immutable. Once an execution enters a
terminal state no transition is allowed, not even to the same state.
Polling must never observe a terminal execution regress to RUNNING.
"""

from typing import FrozenSet, Set, Tuple

from .errors import InvalidTransitionError
from .models import ExecutionState


TERMINAL_STATES: FrozenSet[ExecutionState] = frozenset({
    ExecutionState.COMPLETED,
    ExecutionState.FAILED,
})


_TRANSITIONS: Set[Tuple[ExecutionState, ExecutionState]] = {
    (ExecutionState.RUNNING, ExecutionState.COMPLETED),
    (ExecutionState.RUNNING, ExecutionState.FAILED),
}


def is_terminal(state: ExecutionState) -> bool:
    """Check if an execution state is terminal (immutable)."""
    return state in TERMINAL_STATES


def can_transition(from_state: ExecutionState, to_state: ExecutionState) -> bool:
    """Check if an execution state transition is legal."""
    return (from_state, to_state) in _TRANSITIONS


def validate_transition(
    execution_id: str,
    from_state: ExecutionState,
    to_state: ExecutionState,
) -> None:
    """
    Validate an execution state transition.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(execution_id, from_state.value, to_state.value)
