"""
Workflow execution endpoints.

POST /api/workflow/start        admit a manual run, return its ID at once
GET  /api/workflow/status?id=   poll a run's normalized status
GET  /api/workflow/executions   list tracked runs, newest first

Status reads never block on a running pipeline.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..executions.errors import ExecutionTrackingError
from ..executions.status import StatusView
from ..workflow.models import TriggerType
from .errors import internal_error, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflow", tags=["workflow"])


class StartWorkflowResponse(BaseModel):
    id: str
    status: str
    message: str


class ExecutionSummary(BaseModel):
    id: str
    trigger: str
    state: str
    startedAt: datetime
    endedAt: Optional[datetime] = None


@router.post("/start", response_model=StartWorkflowResponse)
async def start_workflow(request: Request):
    """
    Start a manual workflow run in the background.

    Returns as soon as the run is admitted. Poll /api/workflow/status
    with the returned ID for progress.
    """
    launcher = request.app.state.execution_launcher

    try:
        execution_id = launcher.start_execution(TriggerType.MANUAL)
    except ExecutionTrackingError as e:
        raise to_http_exception(e)
    except Exception:
        raise internal_error("workflow start")

    return StartWorkflowResponse(
        id=execution_id,
        status="running",
        message="Workflow started",
    )


@router.get(
    "/status",
    response_model=StatusView,
    response_model_by_alias=True,
)
async def get_workflow_status(request: Request, id: Optional[str] = None):
    """
    Get the normalized status of a run.

    Raises:
        400: Missing execution ID
        404: Unknown execution ID
    """
    resolver = request.app.state.status_resolver

    try:
        return resolver.resolve_status(id)
    except ExecutionTrackingError as e:
        raise to_http_exception(e)
    except Exception:
        raise internal_error("status lookup")


@router.get("/executions", response_model=List[ExecutionSummary])
async def list_workflow_executions(request: Request):
    registry = request.app.state.execution_registry
    return [
        ExecutionSummary(
            id=record.id,
            trigger=record.trigger.value,
            state=record.state.value,
            startedAt=record.started_at,
            endedAt=record.ended_at,
        )
        for record in registry.list_executions()
    ]
