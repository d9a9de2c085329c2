"""
Scheduled workflow triggering.

Cron parsing, the polling trigger thread, and the process-wide
start/stop control.
"""

from .errors import InvalidScheduleError, InvalidActionError
from .cron import CronSchedule
from .trigger import CronTrigger
from .control import (
    SchedulerControl,
    get_scheduler_control,
    reset_scheduler_control,
)

__all__ = [
    "InvalidScheduleError",
    "InvalidActionError",
    "CronSchedule",
    "CronTrigger",
    "SchedulerControl",
    "get_scheduler_control",
    "reset_scheduler_control",
]
