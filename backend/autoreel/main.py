"""
AutoReel backend service: workflow execution tracking + scheduler control.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, load_settings
from .executions.launcher import ExecutionLauncher
from .executions.registry import ExecutionRegistry
from .executions.status import StatusResolver
from .routes import health, scheduler, workflow
from .scheduling.control import SchedulerControl, get_scheduler_control
from .workflow.base import WorkflowRunner
from .workflow.loader import load_runner

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Stop admitting scheduled runs; in-flight runs are abandoned with the process
    app.state.scheduler_control.stop()
    app.state.execution_launcher.shutdown(wait=False)
    logger.info("AutoReel backend stopped")


def create_app(
    settings: Optional[Settings] = None,
    runner: Optional[WorkflowRunner] = None,
    scheduler_control: Optional[SchedulerControl] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (default: from environment)
        runner: Workflow runner (default: AUTOREEL_WORKFLOW_RUNNER import path)
        scheduler_control: Scheduler switch (default: process-wide instance)
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="AutoReel Backend", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if runner is None:
        runner = load_runner(settings.workflow_runner)

    app.state.settings = settings
    app.state.execution_registry = ExecutionRegistry()
    app.state.execution_launcher = ExecutionLauncher(
        registry=app.state.execution_registry,
        runner=runner,
        max_workers=settings.max_concurrent_runs,
    )
    app.state.status_resolver = StatusResolver(app.state.execution_registry)

    if scheduler_control is None:
        scheduler_control = get_scheduler_control(settings)
    # Scheduled runs go through the same launcher as manual ones
    scheduler_control.attach_launcher(app.state.execution_launcher)
    app.state.scheduler_control = scheduler_control

    app.include_router(health.router)
    app.include_router(scheduler.router)
    app.include_router(workflow.router)

    logger.info(
        f"AutoReel backend ready: schedule '{scheduler_control.schedule}' "
        f"({scheduler_control.timezone}), max {settings.max_concurrent_runs} concurrent run(s)"
    )
    return app


app = create_app()
