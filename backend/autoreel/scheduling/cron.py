"""
Five-field cron schedules.

Supports the standard ``minute hour day-of-month month day-of-week``
syntax: ``*``, single values, comma lists, ``a-b`` ranges and ``/n``
steps on either. Day-of-week accepts 0-7 with both 0 and 7 meaning
Sunday. Month (JAN-DEC) and weekday (SUN-SAT) names are accepted in
any case. As in classic cron, when both day fields are restricted a day
matches if EITHER matches.

Matching is done in the schedule's IANA timezone.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Dict, FrozenSet, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidScheduleError


# (name, min, max)
_FIELDS: Tuple[Tuple[str, int, int], ...] = (
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day of month", 1, 31),
    ("month", 1, 12),
    ("day of week", 0, 7),
)


_MONTH_NAMES: Dict[str, int] = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun",
         "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_WEEKDAY_NAMES: Dict[str, int] = {
    name: number
    for number, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}

_FIELD_NAMES: Dict[str, Dict[str, int]] = {
    "month": _MONTH_NAMES,
    "day of week": _WEEKDAY_NAMES,
}


def _substitute_names(text: str, name: str) -> str:
    """Replace month/weekday names (any case) with their numbers."""
    names = _FIELD_NAMES.get(name)
    if not names:
        return text
    return re.sub(
        r"[A-Za-z]+",
        lambda m: str(names.get(m.group(0).lower(), m.group(0))),
        text,
    )


def _parse_field(expression: str, text: str, name: str, low: int, high: int) -> FrozenSet[int]:
    values = set()
    text = _substitute_names(text, name)

    for part in text.split(","):
        if not part:
            raise InvalidScheduleError(expression, f"empty entry in {name} field")

        base, _, step_text = part.partition("/")
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise InvalidScheduleError(expression, f"invalid step '{step_text}' in {name} field")
            step = int(step_text)

        if base == "*":
            start, end = low, high
        elif "-" in base:
            start_text, _, end_text = base.partition("-")
            if not (start_text.isdigit() and end_text.isdigit()):
                raise InvalidScheduleError(expression, f"invalid range '{base}' in {name} field")
            start, end = int(start_text), int(end_text)
        elif base.isdigit():
            start = int(base)
            # "5/15" means every 15 starting at 5
            end = high if step_text else start
        else:
            raise InvalidScheduleError(expression, f"invalid value '{base}' in {name} field")

        if start < low or end > high or start > end:
            raise InvalidScheduleError(
                expression, f"{name} value out of range {low}-{high}: '{part}'"
            )

        values.update(range(start, end + 1, step))

    return frozenset(values)


@dataclass(frozen=True)
class CronSchedule:
    """A parsed cron expression bound to a timezone."""

    expression: str
    timezone: str
    minutes: FrozenSet[int]
    hours: FrozenSet[int]
    days_of_month: FrozenSet[int]
    months: FrozenSet[int]
    days_of_week: FrozenSet[int]
    day_of_month_restricted: bool
    day_of_week_restricted: bool

    @classmethod
    def parse(cls, expression: str, timezone: str = "UTC") -> "CronSchedule":
        """
        Parse a cron expression.

        Raises:
            InvalidScheduleError: If the expression or timezone is invalid
        """
        fields = expression.split()
        if len(fields) != 5:
            raise InvalidScheduleError(expression, f"expected 5 fields, got {len(fields)}")

        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise InvalidScheduleError(expression, f"unknown timezone '{timezone}'") from None

        parsed = [
            _parse_field(expression, text, name, low, high)
            for text, (name, low, high) in zip(fields, _FIELDS)
        ]

        # 7 is an alias for Sunday
        days_of_week = frozenset(0 if d == 7 else d for d in parsed[4])

        return cls(
            expression=expression,
            timezone=timezone,
            minutes=parsed[0],
            hours=parsed[1],
            days_of_month=parsed[2],
            months=parsed[3],
            days_of_week=days_of_week,
            day_of_month_restricted=not fields[2].startswith("*"),
            day_of_week_restricted=not fields[4].startswith("*"),
        )

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def matches(self, moment: datetime) -> bool:
        """
        Check whether the schedule fires in the minute containing ``moment``.

        Naive datetimes are taken to be UTC.
        """
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=dt_timezone.utc)
        local = moment.astimezone(self.zone)

        if local.minute not in self.minutes:
            return False
        if local.hour not in self.hours:
            return False
        if local.month not in self.months:
            return False

        # Python: Monday=0 .. Sunday=6; cron: Sunday=0 .. Saturday=6
        cron_weekday = (local.weekday() + 1) % 7
        dom_match = local.day in self.days_of_month
        dow_match = cron_weekday in self.days_of_week

        if self.day_of_month_restricted and self.day_of_week_restricted:
            return dom_match or dow_match
        return dom_match and dow_match
