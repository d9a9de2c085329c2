"""
Workflow runner error types.
"""

from typing import Optional


class WorkflowRunnerError(Exception):
    """
    Raised when the workflow pipeline itself fails.

    Captured by the execution launcher into the run's ``error`` field.
    Never propagated as a process crash.
    """

    code = "RunnerFailure"

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        self.stage = stage
        super().__init__(message)
