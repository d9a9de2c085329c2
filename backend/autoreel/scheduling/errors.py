"""
Scheduling error types.
"""

from ..executions.errors import ExecutionTrackingError, InvalidArgumentError


class InvalidScheduleError(ExecutionTrackingError):
    """Raised when a cron expression or timezone cannot be parsed."""

    code = "InvalidSchedule"

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid schedule '{expression}': {reason}")


class InvalidActionError(InvalidArgumentError):
    """Raised when a scheduler control request names an unknown action."""

    def __init__(self, action):
        self.action = action
        super().__init__(f"Invalid action: {action!r}")
