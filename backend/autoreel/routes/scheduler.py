"""
Scheduler control endpoints.

POST /api/scheduler  {"action": "start" | "stop"}
GET  /api/scheduler  current switch state and configured schedule

Both actions are idempotent: starting a started scheduler or stopping a
stopped one succeeds without side effects.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Body, Request
from pydantic import BaseModel, ConfigDict

from ..executions.errors import ExecutionTrackingError
from ..scheduling.errors import InvalidActionError
from .errors import internal_error, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scheduler", tags=["scheduler"])


class SchedulerActionRequest(BaseModel):
    """Request body for scheduler control."""

    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None


class SchedulerActionResponse(BaseModel):
    status: Literal["started", "stopped"]


class SchedulerStatusResponse(BaseModel):
    schedulerStarted: bool
    schedule: str
    timezone: str


@router.post("", response_model=SchedulerActionResponse)
async def control_scheduler(
    request: Request,
    payload: Optional[SchedulerActionRequest] = Body(default=None),
):
    """
    Start or stop the scheduled workflow trigger.

    Raises:
        400: Missing or unknown action
        500: Trigger could not be installed
    """
    control = request.app.state.scheduler_control
    action = payload.action if payload else None

    try:
        if action == "start":
            control.start()
            return SchedulerActionResponse(status="started")

        if action == "stop":
            control.stop()
            return SchedulerActionResponse(status="stopped")

        raise InvalidActionError(action)

    except ExecutionTrackingError as e:
        raise to_http_exception(e)
    except Exception:
        raise internal_error(f"scheduler {action}")


@router.get("", response_model=SchedulerStatusResponse)
async def get_scheduler_status(request: Request):
    control = request.app.state.scheduler_control
    return SchedulerStatusResponse(**control.status())
