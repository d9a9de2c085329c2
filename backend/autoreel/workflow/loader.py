"""
Workflow runner loading.

The production pipeline lives outside this service. It is plugged in by
import path (``package.module:attr``), where ``attr`` is a WorkflowRunner
instance, a WorkflowRunner subclass, or a zero-argument factory
returning one.
"""

import importlib
import logging
from typing import Any, Optional

from .base import StageListener, WorkflowRunner
from .errors import WorkflowRunnerError
from .models import WorkflowResult

logger = logging.getLogger(__name__)


class UnconfiguredWorkflowRunner(WorkflowRunner):
    """Fails every run. Used when no pipeline is configured."""

    MESSAGE = "No workflow runner configured"

    def execute_manual(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        raise WorkflowRunnerError(self.MESSAGE)

    def execute_scheduled(self, listener: Optional[StageListener] = None) -> WorkflowResult:
        raise WorkflowRunnerError(self.MESSAGE)


def import_attr(path: str) -> Any:
    """
    Import an attribute given as ``module.path:attribute``.

    Raises:
        ValueError: If the path format is invalid
        ImportError: If the module cannot be imported
        AttributeError: If the attribute doesn't exist
    """
    if ":" not in path:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    module_name, attr = path.split(":", 1)
    module = importlib.import_module(module_name)

    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part)
    return target


def load_runner(path: Optional[str]) -> WorkflowRunner:
    """
    Resolve the configured workflow runner.

    Args:
        path: Import path, or None/empty for the unconfigured runner

    Raises:
        TypeError: If the target does not produce a WorkflowRunner
    """
    if not path:
        logger.warning("[Workflow] No runner configured; every run will fail")
        return UnconfiguredWorkflowRunner()

    target = import_attr(path)

    if isinstance(target, WorkflowRunner):
        runner = target
    elif callable(target):
        runner = target()
    else:
        runner = None

    if not isinstance(runner, WorkflowRunner):
        raise TypeError(f"'{path}' did not produce a WorkflowRunner (got {type(runner).__name__})")

    logger.info(f"[Workflow] Loaded runner {type(runner).__name__} from {path}")
    return runner
