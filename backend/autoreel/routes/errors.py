"""
Mapping from domain errors to HTTP errors.

Client mistakes become 4xx with the error's taxonomy code. Anything
unexpected becomes a 500 with a generic message; details go to the log,
not the client.
"""

import logging

from fastapi import HTTPException

from ..executions.errors import (
    ExecutionNotFoundError,
    ExecutionTrackingError,
    InvalidArgumentError,
    InvalidTransitionError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "InternalError"


def to_http_exception(error: ExecutionTrackingError) -> HTTPException:
    if isinstance(error, InvalidArgumentError):
        status_code = 400
    elif isinstance(error, ExecutionNotFoundError):
        status_code = 404
    elif isinstance(error, InvalidTransitionError):
        status_code = 409
    else:
        status_code = 500
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": str(error)},
    )


def internal_error(action: str) -> HTTPException:
    """Generic 500 for unexpected failures. Call from an except block."""
    logger.exception(f"Unexpected error during {action}")
    return HTTPException(
        status_code=500,
        detail={"code": INTERNAL_ERROR_CODE, "message": f"Internal error during {action}"},
    )
