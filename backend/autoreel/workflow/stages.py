"""
Stage catalog for the video production pipeline.

The catalog is static configuration: the fixed, ordered list of stage
names the workflow runner walks through. It is used only to turn a list
of completed stages into a human-facing progress percentage.
"""

import math
from typing import Iterable, Tuple


STAGE_CATALOG: Tuple[str, ...] = (
    "trend_research",
    "topic_selection",
    "script_generation",
    "script_review",
    "voiceover",
    "visual_assets",
    "video_render",
    "quality_check",
    "thumbnail",
    "upload",
)

TOTAL_STAGES = len(STAGE_CATALOG)


def is_known_stage(stage: str) -> bool:
    """Check if a stage name belongs to the catalog."""
    return stage in STAGE_CATALOG


def stage_index(stage: str) -> int:
    """
    Get the 0-based position of a stage in the catalog.

    Raises:
        ValueError: If the stage is not in the catalog
    """
    try:
        return STAGE_CATALOG.index(stage)
    except ValueError:
        raise ValueError(f"Unknown stage: {stage}") from None


def compute_progress(completed_stages: Iterable[str], total: int = TOTAL_STAGES) -> int:
    """
    Compute progress percentage from a list of completed stages.

    progress = round(100 * completed / total), rounding halves up and
    capping at 100. The catalog length is the denominator regardless of
    which names were reported.

    Args:
        completed_stages: Completed stage names (order irrelevant)
        total: Denominator, defaults to the catalog length

    Returns:
        Integer percentage in [0, 100]
    """
    if total <= 0:
        return 0
    completed = len(list(completed_stages))
    progress = math.floor(100 * completed / total + 0.5)
    return max(0, min(100, progress))
