"""
Process-wide scheduler control.

Idempotent enable/disable of the cron trigger that admits scheduled
workflow runs. State is a lock-guarded cell: the started flag is the
presence of the trigger handle, so concurrent start/start or start/stop
calls can never leave a trigger double-installed or double-removed.

Scheduled runs are fire-and-forget: the execution ID returned by the
launcher is logged and dropped. Their status remains queryable through
the status resolver by whoever learns the ID (e.g. from the executions
listing).
"""

import logging
import threading
from typing import Optional

from ..config import Settings, load_settings
from ..executions.launcher import ExecutionLauncher
from ..workflow.models import TriggerType
from .cron import CronSchedule
from .trigger import CronTrigger

logger = logging.getLogger(__name__)


class SchedulerControl:
    """
    Start/stop switch for scheduled workflow runs.

    Both operations are idempotent. The launcher may be attached after
    construction so the singleton can exist before the app is wired.
    """

    def __init__(
        self,
        schedule: str,
        timezone: str,
        launcher: Optional[ExecutionLauncher] = None,
        poll_interval: float = 15.0,
    ):
        """
        Initialize scheduler control.

        Args:
            schedule: Cron expression (5 fields)
            timezone: IANA timezone the expression is evaluated in
            launcher: Launcher used to admit scheduled runs
            poll_interval: Seconds between trigger polls

        Raises:
            InvalidScheduleError: If the schedule or timezone is invalid
        """
        self._schedule = CronSchedule.parse(schedule, timezone)
        self._launcher = launcher
        self._poll_interval = poll_interval
        self._trigger: Optional[CronTrigger] = None
        self._lock = threading.Lock()

    @property
    def schedule(self) -> str:
        return self._schedule.expression

    @property
    def timezone(self) -> str:
        return self._schedule.timezone

    @property
    def is_started(self) -> bool:
        with self._lock:
            return self._trigger is not None

    @property
    def trigger(self) -> Optional[CronTrigger]:
        """The installed trigger, or None when stopped."""
        with self._lock:
            return self._trigger

    def attach_launcher(self, launcher: ExecutionLauncher) -> None:
        with self._lock:
            self._launcher = launcher

    def start(self) -> bool:
        """
        Install the cron trigger.

        Returns:
            True if the trigger was installed by this call, False if it
            was already running
        """
        with self._lock:
            if self._trigger is not None:
                logger.debug("[Scheduler] start() ignored, already started")
                return False

            trigger = CronTrigger(
                schedule=self._schedule,
                callback=self._fire,
                poll_interval=self._poll_interval,
            )
            trigger.start()
            self._trigger = trigger

        logger.info(f"[Scheduler] Started: '{self.schedule}' ({self.timezone})")
        return True

    def stop(self) -> bool:
        """
        Remove the cron trigger.

        Returns:
            True if a trigger was removed by this call, False if none was
            installed
        """
        with self._lock:
            trigger = self._trigger
            if trigger is None:
                logger.debug("[Scheduler] stop() ignored, not started")
                return False
            self._trigger = None
            trigger.stop()

        logger.info("[Scheduler] Stopped")
        return True

    def status(self) -> dict:
        return {
            "schedulerStarted": self.is_started,
            "schedule": self.schedule,
            "timezone": self.timezone,
        }

    def _fire(self) -> None:
        # Lock-free read: stop() joins the trigger thread while holding the lock
        launcher = self._launcher
        if launcher is None:
            logger.warning("[Scheduler] Trigger fired with no launcher attached; skipping run")
            return

        execution_id = launcher.start_execution(TriggerType.SCHEDULED)
        logger.info(f"[Scheduler] Scheduled execution {execution_id} admitted")


# Global scheduler control instance
_default_control: Optional[SchedulerControl] = None
_default_control_lock = threading.Lock()


def get_scheduler_control(settings: Optional[Settings] = None) -> SchedulerControl:
    """
    Get the process-wide scheduler control.

    Creates it on first access from ``settings`` (or the environment).
    Later calls return the same instance and ignore ``settings``.
    """
    global _default_control
    with _default_control_lock:
        if _default_control is None:
            settings = settings or load_settings()
            _default_control = SchedulerControl(
                schedule=settings.workflow_schedule,
                timezone=settings.workflow_timezone,
                poll_interval=settings.scheduler_poll_seconds,
            )
        return _default_control


def reset_scheduler_control() -> None:
    """Stop and discard the process-wide instance."""
    global _default_control
    with _default_control_lock:
        control = _default_control
        _default_control = None
    if control is not None:
        control.stop()
