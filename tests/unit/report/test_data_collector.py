"""Tests for ReportDataCollector: aggregation of Frigate rows and the query cache."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from watchdesk.infra.frigate.rows import AttendanceRow, PresenceRow, ZoneExitRow
from watchdesk.report.cache import QueryCache
from watchdesk.report.data_collector import (
    ReportDataCollector,
    aggregate_activity,
    aggregate_attendance,
    aggregate_breaks,
)
from watchdesk.report.timewindow import TimeWindow, resolve_window

DAY_START = datetime(2025, 10, 20, tzinfo=UTC)
WINDOW = TimeWindow(start=DAY_START, end=DAY_START + timedelta(hours=24))


def _epoch(hour: int, minute: int = 0) -> float:
    return (DAY_START + timedelta(hours=hour, minutes=minute)).timestamp()


class TestAggregation:
    def test_activity_groups_by_employee(self):
        employees = aggregate_activity([
            PresenceRow(employee_name="Bob", camera="cam1", first_seen=_epoch(10), last_seen=_epoch(11), activity_count=5),
            PresenceRow(employee_name="Alice", camera="cam1", zones=["a"], first_seen=_epoch(9), last_seen=_epoch(12), activity_count=3),
            PresenceRow(employee_name="Alice", camera="cam2", zones=["b"], first_seen=_epoch(13), last_seen=_epoch(14), activity_count=2),
        ])

        assert [e.employee_name for e in employees] == ["Alice", "Bob"]
        alice = employees[0]
        assert alice.total_work_hours == pytest.approx(4.0)
        assert alice.total_activity == 5
        assert alice.cameras == ["cam1", "cam2"]
        assert alice.zones == ["a", "b"]
        assert alice.first_seen == DAY_START + timedelta(hours=9)
        assert alice.last_seen == DAY_START + timedelta(hours=14)
        assert alice.average_session_duration == pytest.approx(2.0)
        assert alice.productivity_score is None

    def test_unnamed_rows_become_unknown(self):
        employees = aggregate_activity([
            PresenceRow(employee_name=None, camera="cam1", first_seen=_epoch(9), last_seen=_epoch(9, 30)),
        ])
        assert employees[0].employee_name == "Unknown"

    def test_breaks_measured_between_consecutive_exits(self):
        stats = aggregate_breaks([
            ZoneExitRow(employee_name="Alice", left_at=_epoch(10), previous_activity=None),
            ZoneExitRow(employee_name="Alice", left_at=_epoch(10, 30), previous_activity=_epoch(10)),
            ZoneExitRow(employee_name="Alice", left_at=_epoch(12), previous_activity=_epoch(10, 30)),
        ], WINDOW)

        alice = stats[0]
        assert alice.total_breaks == 2
        assert alice.total_break_time == pytest.approx(2.0)
        assert alice.longest_break == pytest.approx(1.5)
        assert alice.shortest_break == pytest.approx(0.5)
        assert alice.average_break_duration == pytest.approx(1.0)
        assert alice.break_frequency == pytest.approx(2 / 24)

    def test_employee_without_breaks_has_zero_stats(self):
        stats = aggregate_breaks([ZoneExitRow(employee_name="Bob", left_at=_epoch(11))], WINDOW)
        assert stats[0].total_breaks == 0
        assert stats[0].shortest_break == 0.0

    def test_attendance_rate_over_window_days(self):
        window = TimeWindow(start=DAY_START, end=DAY_START + timedelta(days=4))
        result = aggregate_attendance([
            AttendanceRow(employee_name="Alice", attendance_date=date(2025, 10, 20),
                          first_seen=_epoch(9), last_seen=_epoch(17)),
            AttendanceRow(employee_name="Alice", attendance_date=date(2025, 10, 21),
                          first_seen=_epoch(33), last_seen=_epoch(37)),
        ], window)

        alice = result[0]
        assert alice.days_present == 2
        assert alice.total_work_hours == pytest.approx(12.0)
        assert alice.average_daily_hours == pytest.approx(6.0)
        assert alice.attendance_rate == pytest.approx(50.0)


class TestReportDataCollector:
    async def test_collects_from_source(self, frigate_source):
        collector = ReportDataCollector(frigate_source)
        employees = await collector.employee_activity(WINDOW, employee_name="Alice", camera=None)

        frigate_source.presence.assert_awaited_once_with(WINDOW.start, WINDOW.end, "Alice", None)
        assert [e.employee_name for e in employees] == ["Alice", "Bob"]

    async def test_camera_summaries(self, frigate_source):
        cameras = await ReportDataCollector(frigate_source).camera_summaries(WINDOW)

        by_name = {c.camera: c for c in cameras}
        assert list(by_name) == ["cam1", "cam2"]
        assert by_name["cam1"].status == "active"
        assert by_name["cam1"].total_recordings == 12
        assert by_name["cam1"].detections.person == 40
        assert by_name["cam1"].detections.cell_phone == 1
        assert by_name["cam1"].detections.total == 41
        assert by_name["cam2"].status == "inactive"
        assert by_name["cam2"].detections.other == 2

    async def test_second_call_is_served_from_cache(self, frigate_source, session_factory):
        collector = ReportDataCollector(frigate_source, QueryCache(session_factory))

        first = await collector.violations(WINDOW)
        second = await collector.violations(WINDOW)

        assert frigate_source.violations.await_count == 1
        assert second == first

    async def test_different_filters_use_different_keys(self, frigate_source, session_factory):
        collector = ReportDataCollector(frigate_source, QueryCache(session_factory))

        await collector.violations(WINDOW, employee_name="Alice")
        await collector.violations(WINDOW, employee_name="Bob")

        assert frigate_source.violations.await_count == 2

    async def test_malformed_cache_entry_is_refetched(self, frigate_source):
        cache = AsyncMock(spec=QueryCache)
        cache.get.return_value = [{"not": "a row"}]
        collector = ReportDataCollector(frigate_source, cache)

        violations = await collector.violations(WINDOW)

        assert len(violations) == 2
        frigate_source.violations.assert_awaited_once()
        cache.set.assert_awaited_once()

    async def test_rolling_window_key_ignores_seconds(self, frigate_source, session_factory):
        collector = ReportDataCollector(frigate_source, QueryCache(session_factory))
        now = DAY_START + timedelta(hours=9, seconds=5)

        await collector.violations(resolve_window(hours=24, now=now))
        await collector.violations(resolve_window(hours=24, now=now + timedelta(seconds=40, microseconds=17)))
        assert frigate_source.violations.await_count == 1

        await collector.violations(resolve_window(hours=24, now=now + timedelta(minutes=1)))
        assert frigate_source.violations.await_count == 2

    async def test_fixed_window_key_is_exact(self, frigate_source, session_factory):
        collector = ReportDataCollector(frigate_source, QueryCache(session_factory))

        await collector.violations(WINDOW)
        await collector.violations(TimeWindow(start=WINDOW.start, end=WINDOW.end - timedelta(seconds=1)))

        assert frigate_source.violations.await_count == 2
