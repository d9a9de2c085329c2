"""
Execution-tracking error types.

All errors inherit from ExecutionTrackingError for easy catching.
Each error carries a stable taxonomy ``code`` that the HTTP layer
surfaces to clients alongside the human-readable message.
"""


class ExecutionTrackingError(Exception):
    """Base exception for all execution-tracking failures."""

    code = "InternalError"


class InvalidArgumentError(ExecutionTrackingError):
    """Raised when a request field is missing or malformed."""

    code = "InvalidArgument"


class MissingExecutionIdError(InvalidArgumentError):
    """Raised when a status query arrives without an execution ID."""

    def __init__(self):
        super().__init__("Missing execution ID")


class ExecutionNotFoundError(ExecutionTrackingError):
    """Raised when an execution cannot be found in the registry."""

    code = "NotFound"

    def __init__(self, execution_id: str):
        self.execution_id = execution_id
        super().__init__(f"Execution not found: {execution_id}")


class DuplicateExecutionIdError(ExecutionTrackingError):
    """
    Raised when admission collides with an existing execution ID.

    Never expected under a correct ID generator. Treat as a bug.
    """

    code = "DuplicateId"

    def __init__(self, execution_id: str):
        self.execution_id = execution_id
        super().__init__(f"Execution with ID '{execution_id}' already exists")


class InvalidTransitionError(ExecutionTrackingError):
    """Raised when attempting to re-resolve an already-terminal execution."""

    code = "InvalidTransition"

    def __init__(self, execution_id: str, current_state: str, target_state: str):
        self.execution_id = execution_id
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid execution state transition for {execution_id}: "
            f"{current_state} -> {target_state}"
        )
