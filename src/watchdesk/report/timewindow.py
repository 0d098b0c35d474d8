"""Resolve report filters into a concrete UTC time window."""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta
from typing import Optional

from watchdesk.exceptions import ValidationError

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime
    # True when the window ends at the moment it was resolved
    rolling: bool = field(default=False, compare=False)

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    @property
    def days(self) -> int:
        """Whole days covered, rounded up; at least 1."""
        seconds = (self.end - self.start).total_seconds()
        return max(1, -int(-seconds // 86400))

    def cache_bounds(self) -> tuple[str, str]:
        """Start and end as cache-key parts; rolling windows share a key for the whole minute."""
        if not self.rolling:
            return self.start.isoformat(), self.end.isoformat()
        start, end = (t.replace(second=0, microsecond=0) for t in (self.start, self.end))
        return start.isoformat(), end.isoformat()


def _parse_bound(value: str, name: str, end_of_day: bool) -> datetime:
    value = value.strip()
    try:
        if _DATE_ONLY.match(value):
            day = datetime.strptime(value, "%Y-%m-%d").date()
            return datetime.combine(day, END_OF_DAY if end_of_day else time.min, tzinfo=UTC)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError("Invalid date range", [f"{name}: {value!r} is not a valid date"]) from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def resolve_window(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    hours: Optional[int] = None,
    default_hours: int = 24,
    now: Optional[datetime] = None,
) -> TimeWindow:
    """An explicit date range wins over ``hours``; ``hours`` wins over the default.

    Date-only bounds cover whole UTC days. Missing range ends default to the
    last 24 hours (start) and now (end).
    """
    now = now or datetime.now(UTC)

    if start_date or end_date:
        start = _parse_bound(start_date, "start_date", end_of_day=False) if start_date else now - timedelta(hours=24)
        end = _parse_bound(end_date, "end_date", end_of_day=True) if end_date else now
        if start > end:
            raise ValidationError("Invalid date range", ["start_date must not be after end_date"])
        return TimeWindow(start=start, end=end, rolling=not end_date)

    if hours is not None:
        if hours <= 0:
            raise ValidationError("Invalid hours", ["hours must be positive"])
        return TimeWindow(start=now - timedelta(hours=hours), end=now, rolling=True)

    return TimeWindow(start=now - timedelta(hours=default_hours), end=now, rolling=True)
