"""Assemble typed report bodies from collected analytics."""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from watchdesk.domain.models.analytics import (
    ActivityPattern,
    BreakStats,
    CameraSummary,
    EmployeeActivity,
    EmployeeAttendance,
    Violation,
)
from watchdesk.domain.models.report import (
    AttendancePoint,
    AttendanceReport,
    AttendanceSummary,
    CameraAnalytics,
    ComprehensiveReport,
    EmployeeAnalytics,
    EmployeeBreakdown,
    EmployeeCharts,
    EmployeeEntry,
    EmployeeMedia,
    EmployeeSummary,
    EmployeeSummaryReport,
    ExecutiveSummary,
    ProductivityPoint,
    ReportFilters,
    ReportPeriod,
    ViolationAnalytics,
    ViolationContext,
    ViolationEntry,
    ViolationMedia,
    ViolationPoint,
    ViolationReport,
    ViolationSummary,
    ViolationTimeline,
    ViolationTrends,
)
from watchdesk.report.data_collector import UNKNOWN_EMPLOYEE
from watchdesk.report.timewindow import TimeWindow
from watchdesk.report.timezones import timezone_info


@dataclass(frozen=True)
class ReportContext:
    """Everything a builder needs besides the analytics themselves."""

    report_id: str
    generated_at: datetime
    window: TimeWindow
    filters: ReportFilters
    zone: ZoneInfo
    media_base_url: str

    def header(self) -> dict:
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at,
            "timezone": self.filters.timezone,
            "timezone_info": timezone_info(self.zone, self.generated_at),
            "period": ReportPeriod(
                start=self.window.start,
                end=self.window.end,
                duration_hours=self.window.duration_hours,
            ),
            "filters": self.filters,
        }


def localize(value: Any, zone: ZoneInfo) -> Any:
    """Return a copy with every datetime converted to ``zone``."""
    if isinstance(value, datetime):
        return value.astimezone(zone)
    if isinstance(value, BaseModel):
        return value.model_copy(
            update={name: localize(getattr(value, name), zone) for name in type(value).model_fields}
        )
    if isinstance(value, list):
        return [localize(v, zone) for v in value]
    if isinstance(value, dict):
        return {k: localize(v, zone) for k, v in value.items()}
    return value


# ── Media ──────────────────────────────────────────────────────


def violation_media(base_url: str, violation: Violation) -> Optional[ViolationMedia]:
    if not violation.event_id:
        return None
    root = f"{base_url.rstrip('/')}/api/events/{violation.event_id}"
    return ViolationMedia(
        snapshot=f"{root}/snapshot.jpg",
        thumbnail=f"{root}/thumbnail.jpg",
        video=f"{root}/clip.mp4",
    )


def employee_media(base_url: str, employee: EmployeeActivity, violations: list[Violation]) -> EmployeeMedia:
    profile = None
    if employee.cameras:
        profile = f"{base_url.rstrip('/')}/api/{employee.cameras[0]}/latest.jpg"
    media = []
    for violation in violations:
        links = violation_media(base_url, violation)
        if links is not None:
            media.append(links)
    return EmployeeMedia(profile_snapshot=profile, violation_media=media)


# ── Shared figures ─────────────────────────────────────────────


def _average_productivity(activity: list[EmployeeActivity]) -> Optional[float]:
    scores = [e.productivity_score for e in activity if e.productivity_score is not None]
    return sum(scores) / len(scores) if scores else None


def _attendance_rate(activity: list[EmployeeActivity]) -> float:
    """Percent of employees with any recorded work time."""
    if not activity:
        return 0.0
    present = sum(1 for e in activity if e.total_work_hours > 0)
    return present / len(activity) * 100


def _violations_by_employee(violations: list[Violation]) -> dict[str, list[Violation]]:
    grouped: dict[str, list[Violation]] = {}
    for v in violations:
        if v.employee_name:
            grouped.setdefault(v.employee_name, []).append(v)
    return grouped


def _violation_entry(ctx: ReportContext, violation: Violation) -> ViolationEntry:
    return ViolationEntry(
        **violation.model_dump(),
        media_urls=violation_media(ctx.media_base_url, violation) if ctx.filters.include_media else None,
        timeline=ViolationTimeline(detected_at=violation.timestamp),
        context=ViolationContext(camera=violation.camera, zones=violation.zones, confidence=violation.confidence),
    )


def _counts(values) -> dict:
    return dict(sorted(Counter(values).items()))


# ── Builders ───────────────────────────────────────────────────


def build_employee_summary(
    ctx: ReportContext,
    activity: list[EmployeeActivity],
    breaks: list[BreakStats],
    violations: list[Violation],
    patterns: list[ActivityPattern],
) -> EmployeeSummaryReport:
    breaks_by = {b.employee_name: b for b in breaks}
    patterns_by = {p.employee_name: p for p in patterns}
    violations_by = _violations_by_employee(violations)

    employees = []
    for emp in activity:
        own = violations_by.get(emp.employee_name, [])
        brk = breaks_by.get(emp.employee_name)
        breakdown = None
        if ctx.filters.include_breakdown:
            hours_by_camera: dict[str, float] = {}
            for session in emp.sessions:
                key = session.camera or UNKNOWN_EMPLOYEE
                hours_by_camera[key] = hours_by_camera.get(key, 0.0) + session.duration_hours
            breakdown = EmployeeBreakdown(
                hours_by_camera=hours_by_camera,
                session_count=len(emp.sessions),
                average_session_duration=emp.average_session_duration,
                break_count=brk.total_breaks if brk else 0,
                total_break_time=brk.total_break_time if brk else 0.0,
            )
        employees.append(
            EmployeeEntry(
                **emp.model_dump(),
                break_data=brk,
                violations=own,
                activity_patterns=patterns_by.get(emp.employee_name),
                media_urls=employee_media(ctx.media_base_url, emp, own) if ctx.filters.include_media else None,
                breakdown=breakdown,
            )
        )

    total_hours = sum(e.total_work_hours for e in activity)
    summary = EmployeeSummary(
        total_employees=len(activity),
        total_work_hours=total_hours,
        average_work_hours=total_hours / len(activity) if activity else 0.0,
        total_violations=len(violations),
        average_productivity=_average_productivity(activity),
        attendance_rate=_attendance_rate(activity),
    )

    hourly: dict[int, int] = {}
    for pattern in patterns:
        for hour, count in pattern.hourly_patterns.items():
            hourly[hour] = hourly.get(hour, 0) + count
    charts = EmployeeCharts(
        productivity_trend=[
            ProductivityPoint(employee=e.employee_name, productivity=e.productivity_score, work_hours=e.total_work_hours)
            for e in activity
        ],
        violation_trend=[
            ViolationPoint(timestamp=v.timestamp, employee=v.employee_name, camera=v.camera, confidence=v.confidence)
            for v in violations
        ],
        attendance_pattern=[
            AttendancePoint(employee=e.employee_name, present=e.total_work_hours > 0, work_hours=e.total_work_hours)
            for e in activity
        ],
        hourly_activity=dict(sorted(hourly.items())),
    )

    report = EmployeeSummaryReport(**ctx.header(), summary=summary, employees=employees, charts=charts)
    return localize(report, ctx.zone)


def build_violation_report(ctx: ReportContext, violations: list[Violation]) -> ViolationReport:
    by_employee = Counter(v.employee_name or UNKNOWN_EMPLOYEE for v in violations)
    by_camera = Counter(v.camera for v in violations)

    summary = ViolationSummary(
        total_violations=len(violations),
        by_employee=dict(sorted(by_employee.items())),
        by_camera=dict(sorted(by_camera.items())),
        most_violated_employee=by_employee.most_common(1)[0][0] if by_employee else None,
        most_violated_camera=by_camera.most_common(1)[0][0] if by_camera else None,
    )
    # Buckets are UTC days/hours; the display timezone does not move them.
    trends = ViolationTrends(
        daily=_counts(v.timestamp.date().isoformat() for v in violations),
        hourly=_counts(v.timestamp.hour for v in violations),
        by_employee=dict(sorted(by_employee.items())),
    )

    report = ViolationReport(
        **ctx.header(),
        summary=summary,
        violations=[_violation_entry(ctx, v) for v in violations],
        trends=trends,
    )
    return localize(report, ctx.zone)


def build_attendance_report(ctx: ReportContext, attendance: list[EmployeeAttendance]) -> AttendanceReport:
    overall = sum(a.attendance_rate for a in attendance) / len(attendance) if attendance else 0.0
    report = AttendanceReport(
        **ctx.header(),
        summary=AttendanceSummary(
            total_employees=len(attendance),
            period_days=ctx.window.days,
            overall_attendance_rate=overall,
        ),
        employees=attendance,
    )
    return localize(report, ctx.zone)


def build_comprehensive_report(
    ctx: ReportContext,
    activity: list[EmployeeActivity],
    breaks: list[BreakStats],
    violations: list[Violation],
    patterns: list[ActivityPattern],
    cameras: list[CameraSummary],
) -> ComprehensiveReport:
    executive = ExecutiveSummary(
        total_employees=len(activity),
        total_work_hours=sum(e.total_work_hours for e in activity),
        average_productivity=_average_productivity(activity),
        total_violations=len(violations),
        attendance_rate=_attendance_rate(activity),
        system_health="healthy" if cameras else "degraded",
    )
    report = ComprehensiveReport(
        **ctx.header(),
        executive_summary=executive,
        employee_analytics=EmployeeAnalytics(work_hours=activity, break_time=breaks, activity_patterns=patterns),
        violation_analytics=ViolationAnalytics(
            total_violations=len(violations),
            violations=[_violation_entry(ctx, v) for v in violations],
            hotspots=_counts(v.camera for v in violations),
        ),
        camera_analytics=CameraAnalytics(total_cameras=len(cameras), cameras=cameras),
    )
    return localize(report, ctx.zone)
