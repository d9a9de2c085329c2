"""
Workflow result models.

Structured representation of what the workflow runner hands back when a
run finishes. The execution-tracking core treats these as opaque values
and passes them through to status views verbatim.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys for the polling client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class TriggerType(str, Enum):
    """What caused a run to be admitted."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"


class CostSummary(CamelModel):
    """Accumulated spend for a run, in USD."""

    total: float = 0.0
    breakdown: Dict[str, float] = Field(default_factory=dict)

    def add(self, category: str, amount: float) -> None:
        self.breakdown[category] = self.breakdown.get(category, 0.0) + amount
        self.total += amount


class QualitySummary(CamelModel):
    """Per-dimension quality scores (0-10) and the overall score."""

    scores: Dict[str, float] = Field(default_factory=dict)
    overall: float = 0.0


class VideoArtifact(CamelModel):
    """Final rendered and uploaded video."""

    url: Optional[str] = None
    duration_seconds: Optional[float] = None
    title: Optional[str] = None


class StageError(CamelModel):
    """A non-fatal error recorded against a single stage."""

    node: str
    error: str
    timestamp: datetime = Field(default_factory=utc_now)


class WorkflowResult(CamelModel):
    """
    Final result of a workflow run.

    Produced by a WorkflowRunner when the pipeline runs to completion.
    ``errors`` lists per-stage problems the pipeline recovered from.
    """

    status: str = "completed"
    current_stage: str = ""
    completed_stages: List[str] = Field(default_factory=list)
    costs: CostSummary = Field(default_factory=CostSummary)
    quality: Optional[QualitySummary] = None
    video: Optional[VideoArtifact] = None
    errors: List[StageError] = Field(default_factory=list)
