"""
Runtime configuration.

All settings come from environment variables with defaults suitable for
local development. Read once at app creation via load_settings().
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


ENV_WORKFLOW_SCHEDULE = "WORKFLOW_SCHEDULE"
ENV_WORKFLOW_TIMEZONE = "WORKFLOW_TIMEZONE"
ENV_MAX_CONCURRENT_RUNS = "AUTOREEL_MAX_CONCURRENT_RUNS"
ENV_SCHEDULER_POLL_SECONDS = "AUTOREEL_SCHEDULER_POLL_SECONDS"
ENV_LOG_LEVEL = "AUTOREEL_LOG_LEVEL"
ENV_CORS_ORIGINS = "AUTOREEL_CORS_ORIGINS"
ENV_WORKFLOW_RUNNER = "AUTOREEL_WORKFLOW_RUNNER"

DEFAULT_WORKFLOW_SCHEDULE = "0 6 * * *"  # Daily at 06:00
DEFAULT_WORKFLOW_TIMEZONE = "Asia/Kolkata"


@dataclass(frozen=True)
class Settings:
    workflow_schedule: str = DEFAULT_WORKFLOW_SCHEDULE
    workflow_timezone: str = DEFAULT_WORKFLOW_TIMEZONE
    max_concurrent_runs: int = 4
    scheduler_poll_seconds: float = 15.0
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    # "module:attr" of the production pipeline
    workflow_runner: Optional[str] = None


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (tests)

    Raises:
        ValueError: If a numeric variable is malformed
    """
    env = os.environ if env is None else env

    origins = env.get(ENV_CORS_ORIGINS)
    cors_origins = (
        [o.strip() for o in origins.split(",") if o.strip()]
        if origins
        else Settings().cors_origins
    )

    return Settings(
        workflow_schedule=env.get(ENV_WORKFLOW_SCHEDULE) or DEFAULT_WORKFLOW_SCHEDULE,
        workflow_timezone=env.get(ENV_WORKFLOW_TIMEZONE) or DEFAULT_WORKFLOW_TIMEZONE,
        max_concurrent_runs=_int_env(env, ENV_MAX_CONCURRENT_RUNS, 4),
        scheduler_poll_seconds=_float_env(env, ENV_SCHEDULER_POLL_SECONDS, 15.0),
        log_level=(env.get(ENV_LOG_LEVEL) or "INFO").upper(),
        cors_origins=cors_origins,
        workflow_runner=env.get(ENV_WORKFLOW_RUNNER) or None,
    )
