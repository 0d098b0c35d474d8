"""ReportDataCollector: pulls Frigate rows through the cache and aggregates them."""

import logging
from datetime import UTC, datetime
from typing import Any, Awaitable, Callable, Optional

import pydantic
from pydantic import TypeAdapter

from watchdesk.domain.models.analytics import (
    ActivityPattern,
    AttendanceDay,
    BreakSession,
    BreakStats,
    CameraSummary,
    DetectionCounts,
    EmployeeActivity,
    EmployeeAttendance,
    Violation,
    WorkSession,
)
from watchdesk.infra.frigate.rows import (
    ActivityRow,
    AttendanceRow,
    CameraActivityRow,
    PresenceRow,
    RecordingRow,
    ViolationRow,
    ZoneExitRow,
)
from watchdesk.infra.frigate.source import FrigateSource
from watchdesk.report.cache import QueryCache
from watchdesk.report.timewindow import TimeWindow

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "Unknown"


def _ts(epoch: float) -> datetime:
    return datetime.fromtimestamp(epoch, UTC)


def _name(value: Optional[str]) -> str:
    return value or UNKNOWN_EMPLOYEE


def _add_unique(target: list[str], values) -> None:
    for value in values:
        if value and value not in target:
            target.append(value)


class ReportDataCollector:
    """Collects analytics for one report window from the Frigate source.

    Raw row sets are cached per (query, window, filters); aggregation always
    runs on the fresh or cached rows.
    """

    def __init__(self, source: FrigateSource, cache: Optional[QueryCache] = None) -> None:
        self._source = source
        self._cache = cache

    async def employee_activity(
        self, window: TimeWindow, employee_name: Optional[str] = None, camera: Optional[str] = None
    ) -> list[EmployeeActivity]:
        rows = await self._rows(
            "presence", window, PresenceRow,
            lambda: self._source.presence(window.start, window.end, employee_name, camera),
            employee_name, camera,
        )
        return aggregate_activity(rows)

    async def break_stats(
        self, window: TimeWindow, employee_name: Optional[str] = None, camera: Optional[str] = None
    ) -> list[BreakStats]:
        rows = await self._rows(
            "zone_exits", window, ZoneExitRow,
            lambda: self._source.zone_exits(window.start, window.end, employee_name, camera),
            employee_name, camera,
        )
        return aggregate_breaks(rows, window)

    async def violations(
        self, window: TimeWindow, employee_name: Optional[str] = None, camera: Optional[str] = None
    ) -> list[Violation]:
        rows = await self._rows(
            "violations", window, ViolationRow,
            lambda: self._source.violations(window.start, window.end, employee_name, camera),
            employee_name, camera,
        )
        return to_violations(rows)

    async def activity_patterns(
        self, window: TimeWindow, employee_name: Optional[str] = None, camera: Optional[str] = None
    ) -> list[ActivityPattern]:
        rows = await self._rows(
            "activity", window, ActivityRow,
            lambda: self._source.activity(window.start, window.end, employee_name, camera),
            employee_name, camera,
        )
        return aggregate_patterns(rows)

    async def attendance(self, window: TimeWindow, employee_name: Optional[str] = None) -> list[EmployeeAttendance]:
        rows = await self._rows(
            "attendance", window, AttendanceRow,
            lambda: self._source.attendance(window.start, window.end, employee_name),
            employee_name,
        )
        return aggregate_attendance(rows, window)

    async def camera_summaries(self, window: TimeWindow) -> list[CameraSummary]:
        cameras = await self._rows("cameras", window, str, self._source.cameras)
        activity = await self._rows(
            "camera_activity", window, CameraActivityRow,
            lambda: self._source.camera_activity(window.start, window.end),
        )
        recordings = await self._rows(
            "recordings", window, RecordingRow,
            lambda: self._source.recordings(window.start, window.end),
        )
        return summarize_cameras(cameras, activity, recordings)

    async def _rows(
        self,
        query: str,
        window: TimeWindow,
        row_type: Any,
        fetch: Callable[[], Awaitable[list]],
        *scope: Optional[str],
    ) -> list:
        adapter = TypeAdapter(list[row_type])
        key = ":".join(["frigate", query, *window.cache_bounds(), *(s or "*" for s in scope)])

        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached is not None:
                try:
                    return adapter.validate_python(cached)
                except pydantic.ValidationError:
                    logger.warning("Discarding malformed cache entry %s", key)

        rows = await fetch()
        if self._cache is not None:
            await self._cache.set(key, adapter.dump_python(rows, mode="json"))
        return rows


# ── Aggregation ────────────────────────────────────────────────


def aggregate_activity(rows: list[PresenceRow]) -> list[EmployeeActivity]:
    grouped: dict[str, EmployeeActivity] = {}
    for row in rows:
        name = _name(row.employee_name)
        emp = grouped.setdefault(name, EmployeeActivity(employee_name=name))
        first, last = _ts(row.first_seen), _ts(row.last_seen)
        hours = (row.last_seen - row.first_seen) / 3600

        emp.total_work_hours += hours
        emp.total_activity += row.activity_count
        _add_unique(emp.cameras, [row.camera])
        _add_unique(emp.zones, row.zones)
        emp.sessions.append(
            WorkSession(
                camera=row.camera,
                zones=row.zones,
                first_seen=first,
                last_seen=last,
                duration_hours=hours,
                activity_count=row.activity_count,
            )
        )
        if emp.first_seen is None or first < emp.first_seen:
            emp.first_seen = first
        if emp.last_seen is None or last > emp.last_seen:
            emp.last_seen = last

    for emp in grouped.values():
        if emp.sessions:
            emp.average_session_duration = emp.total_work_hours / len(emp.sessions)
    return sorted(grouped.values(), key=lambda e: e.employee_name)


def aggregate_breaks(rows: list[ZoneExitRow], window: TimeWindow) -> list[BreakStats]:
    """A break is the gap between two consecutive zone exits of the same employee."""
    grouped: dict[str, BreakStats] = {}
    for row in rows:
        name = _name(row.employee_name)
        stats = grouped.setdefault(name, BreakStats(employee_name=name))
        if row.previous_activity is None:
            continue
        stats.break_sessions.append(
            BreakSession(
                camera=row.camera,
                zones=row.zones,
                break_time=_ts(row.left_at),
                previous_activity=_ts(row.previous_activity),
                duration_hours=(row.left_at - row.previous_activity) / 3600,
            )
        )

    window_hours = window.duration_hours
    for stats in grouped.values():
        durations = [s.duration_hours for s in stats.break_sessions]
        stats.total_breaks = len(durations)
        stats.total_break_time = sum(durations)
        stats.average_break_duration = stats.total_break_time / len(durations) if durations else 0.0
        stats.longest_break = max(durations, default=0.0)
        stats.shortest_break = min(durations, default=0.0)
        stats.break_frequency = stats.total_breaks / window_hours if window_hours > 0 else 0.0
    return sorted(grouped.values(), key=lambda s: s.employee_name)


def to_violations(rows: list[ViolationRow]) -> list[Violation]:
    return [
        Violation(
            event_id=row.event_id,
            timestamp=_ts(row.timestamp),
            camera=row.camera,
            employee_name=row.employee_name,
            confidence=row.confidence,
            zones=row.zones,
        )
        for row in rows
    ]


def aggregate_patterns(rows: list[ActivityRow]) -> list[ActivityPattern]:
    grouped: dict[str, ActivityPattern] = {}
    for row in rows:
        name = _name(row.employee_name)
        pattern = grouped.setdefault(name, ActivityPattern(employee_name=name))
        count = row.activity_count
        pattern.hourly_patterns[row.hour_of_day] = pattern.hourly_patterns.get(row.hour_of_day, 0) + count
        pattern.daily_patterns[row.day_of_week] = pattern.daily_patterns.get(row.day_of_week, 0) + count
        if row.camera:
            pattern.camera_preferences[row.camera] = pattern.camera_preferences.get(row.camera, 0) + count
        for zone in row.zones:
            pattern.zone_preferences[zone] = pattern.zone_preferences.get(zone, 0) + count
    return sorted(grouped.values(), key=lambda p: p.employee_name)


def summarize_cameras(
    cameras: list[str],
    activity: list[CameraActivityRow],
    recordings: list[RecordingRow],
) -> list[CameraSummary]:
    names = list(cameras)
    _add_unique(names, sorted({row.camera for row in activity} | {row.camera for row in recordings}))
    recordings_by_camera = {row.camera: row for row in recordings}

    summaries = []
    for name in names:
        counts = DetectionCounts()
        last_activity: Optional[datetime] = None
        for row in activity:
            if row.camera != name:
                continue
            if row.label == "person":
                counts.person += row.detections
            elif row.label == "cell phone":
                counts.cell_phone += row.detections
            else:
                counts.other += row.detections
            counts.total += row.detections
            if row.last_seen is not None:
                seen = _ts(row.last_seen)
                last_activity = seen if last_activity is None else max(last_activity, seen)

        rec = recordings_by_camera.get(name)
        summaries.append(
            CameraSummary(
                camera=name,
                status="active" if rec and rec.total_recordings > 0 else "inactive",
                last_activity=last_activity,
                last_recording=_ts(rec.last_recording) if rec and rec.last_recording is not None else None,
                total_recordings=rec.total_recordings if rec else 0,
                detections=counts,
            )
        )
    return summaries


def aggregate_attendance(rows: list[AttendanceRow], window: TimeWindow) -> list[EmployeeAttendance]:
    grouped: dict[str, EmployeeAttendance] = {}
    for row in rows:
        name = _name(row.employee_name)
        att = grouped.setdefault(name, EmployeeAttendance(employee_name=name))
        att.records.append(
            AttendanceDay(
                date=row.attendance_date,
                first_seen=_ts(row.first_seen),
                last_seen=_ts(row.last_seen),
                work_hours=(row.last_seen - row.first_seen) / 3600,
                activity_count=row.activity_count,
            )
        )

    period_days = window.days
    for att in grouped.values():
        att.days_present = len({r.date for r in att.records})
        att.total_work_hours = sum(r.work_hours for r in att.records)
        att.average_daily_hours = att.total_work_hours / att.days_present if att.days_present else 0.0
        att.attendance_rate = min(100.0, att.days_present / period_days * 100)
    return sorted(grouped.values(), key=lambda a: a.employee_name)
