"""
Execution tracking: admission, supervision and status of workflow runs.

Scope:
- Execution records and their single terminal transition
- Thread-safe in-memory registry
- Non-blocking launcher with one supervised task per run
- Normalized status views for polling clients

Not included:
- Persistence across restarts (registry is in-memory only)
- Cancellation or retry of runs
"""

from .errors import (
    ExecutionTrackingError,
    InvalidArgumentError,
    MissingExecutionIdError,
    ExecutionNotFoundError,
    DuplicateExecutionIdError,
    InvalidTransitionError,
)
from .models import (
    ExecutionState,
    ExecutionFailure,
    ExecutionRecord,
)
from .state import (
    TERMINAL_STATES,
    is_terminal,
    can_transition,
)
from .registry import ExecutionRegistry
from .launcher import ExecutionLauncher, generate_execution_id
from .status import StatusResolver, StatusView, IDLE_STATUS

__all__ = [
    # Errors
    "ExecutionTrackingError",
    "InvalidArgumentError",
    "MissingExecutionIdError",
    "ExecutionNotFoundError",
    "DuplicateExecutionIdError",
    "InvalidTransitionError",
    # Models
    "ExecutionState",
    "ExecutionFailure",
    "ExecutionRecord",
    # State validation
    "TERMINAL_STATES",
    "is_terminal",
    "can_transition",
    # Registry
    "ExecutionRegistry",
    # Launcher
    "ExecutionLauncher",
    "generate_execution_id",
    # Status
    "StatusResolver",
    "StatusView",
    "IDLE_STATUS",
]
