"""
Periodic cron trigger.

A daemon thread wakes every ``poll_interval`` seconds and fires the
callback once for each wall-clock minute matching the schedule. The
last fired minute is remembered so a fast poll never fires twice in
the same minute.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .cron import CronSchedule

logger = logging.getLogger(__name__)


def _minute_key(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc).replace(second=0, microsecond=0)


class CronTrigger:
    """
    Background thread firing a callback on a cron schedule.

    Callback errors are logged and never stop the trigger.
    """

    def __init__(
        self,
        schedule: CronSchedule,
        callback: Callable[[], object],
        poll_interval: float = 15.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.schedule = schedule
        self.callback = callback
        self.poll_interval = poll_interval
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_fired: Optional[datetime] = None
        self.fire_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self, now: Optional[datetime] = None) -> bool:
        """
        Evaluate the schedule once.

        Returns:
            True if the callback fired on this tick
        """
        now = now or self._clock()
        minute = _minute_key(now)

        if minute == self._last_fired or not self.schedule.matches(now):
            return False

        self._last_fired = minute
        self.fire_count += 1
        logger.info(f"[CronTrigger] Firing '{self.schedule.expression}' at {minute.isoformat()}")

        try:
            self.callback()
        except Exception:
            logger.exception("[CronTrigger] Scheduled callback failed")
        return True

    def start(self) -> None:
        """Start the polling thread. No-op if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            daemon=True,
            name="cron-trigger",
        )
        self._thread.start()
        logger.info(
            f"[CronTrigger] Started '{self.schedule.expression}' ({self.schedule.timezone})"
        )

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the polling thread. No-op if not running."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("[CronTrigger] Stopped")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self.poll_interval)
