"""
Workflow runner interface for the video production pipeline.

The pipeline's stages (research, scripting, voiceover, rendering,
upload) live behind WorkflowRunner. The execution-tracking core never
looks inside a run; it only sees the final WorkflowResult or an error.
"""

from .errors import WorkflowRunnerError
from .models import (
    TriggerType,
    CostSummary,
    QualitySummary,
    VideoArtifact,
    StageError,
    WorkflowResult,
)
from .stages import STAGE_CATALOG, TOTAL_STAGES, compute_progress
from .base import (
    StageListener,
    WorkflowRunner,
    StageContext,
    StagedWorkflowRunner,
)

__all__ = [
    # Errors
    "WorkflowRunnerError",
    # Models
    "TriggerType",
    "CostSummary",
    "QualitySummary",
    "VideoArtifact",
    "StageError",
    "WorkflowResult",
    # Stage catalog
    "STAGE_CATALOG",
    "TOTAL_STAGES",
    "compute_progress",
    # Runners
    "StageListener",
    "WorkflowRunner",
    "StageContext",
    "StagedWorkflowRunner",
]
