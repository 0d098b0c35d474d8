"""Flatten a report body into titled tables for the CSV, XLSX and PDF writers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from watchdesk.domain.models.report import (
    AttendanceReport,
    ComprehensiveReport,
    EmployeeSummaryReport,
    ReportHeader,
    ViolationReport,
)

REPORT_TITLES = {
    "employee_summary": "Employee Summary Report",
    "violation_report": "Violation Report",
    "attendance_report": "Attendance Report",
    "comprehensive_dashboard": "Comprehensive Dashboard",
}


@dataclass
class TableSection:
    title: str
    headers: list[str]
    rows: list[tuple] = field(default_factory=list)


@dataclass
class ReportTables:
    """Key/value summary followed by any number of row tables."""

    title: str
    summary: list[tuple[str, Any]] = field(default_factory=list)
    sections: list[TableSection] = field(default_factory=list)


def cell(value: Any) -> Any:
    """Normalise a value for a spreadsheet/CSV cell."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    if isinstance(value, float):
        return round(value, 2)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def _row(*values: Any) -> tuple:
    return tuple(cell(v) for v in values)


def _header_rows(report: ReportHeader) -> list[tuple[str, Any]]:
    return [
        ("Report ID", report.report_id),
        ("Generated At", cell(report.generated_at)),
        ("Timezone", report.timezone),
        ("Period Start", cell(report.period.start)),
        ("Period End", cell(report.period.end)),
        ("Duration (hours)", cell(report.period.duration_hours)),
    ]


def _summary_rows(summary: Any) -> list[tuple[str, Any]]:
    rows = []
    for name, value in summary.model_dump().items():
        if isinstance(value, dict):
            continue
        rows.append((name.replace("_", " ").title(), cell(value)))
    return rows


def _employee_section(report: EmployeeSummaryReport) -> TableSection:
    return TableSection(
        title="Employees",
        headers=["Employee", "Work Hours", "Activity", "Sessions", "Breaks", "Break Hours", "Violations",
                 "Cameras", "First Seen", "Last Seen"],
        rows=[
            _row(
                e.employee_name,
                e.total_work_hours,
                e.total_activity,
                len(e.sessions),
                e.break_data.total_breaks if e.break_data else 0,
                e.break_data.total_break_time if e.break_data else 0.0,
                len(e.violations),
                e.cameras,
                e.first_seen,
                e.last_seen,
            )
            for e in report.employees
        ],
    )


def _snapshot(violation: Any) -> Any:
    media = getattr(violation, "media_urls", None)
    return media.snapshot if media else None


def _violation_section(violations) -> TableSection:
    return TableSection(
        title="Violations",
        headers=["Timestamp", "Employee", "Camera", "Confidence", "Zones", "Snapshot"],
        rows=[
            _row(
                v.timestamp,
                v.employee_name,
                v.camera,
                v.confidence,
                v.zones,
                _snapshot(v),
            )
            for v in violations
        ],
    )


def _counts_section(title: str, key_header: str, counts: dict) -> TableSection:
    return TableSection(title=title, headers=[key_header, "Count"], rows=[_row(k, v) for k, v in counts.items()])


def tabulate(report: ReportHeader) -> ReportTables:
    tables = ReportTables(title=REPORT_TITLES.get(report.report_type, "Report"), summary=_header_rows(report))

    if isinstance(report, EmployeeSummaryReport):
        tables.summary += _summary_rows(report.summary)
        tables.sections.append(_employee_section(report))
        tables.sections.append(_violation_section([v for e in report.employees for v in e.violations]))
    elif isinstance(report, ViolationReport):
        tables.summary += _summary_rows(report.summary)
        tables.sections.append(_violation_section(report.violations))
        tables.sections.append(_counts_section("By Camera", "Camera", report.summary.by_camera))
        tables.sections.append(_counts_section("Daily", "Date", report.trends.daily))
    elif isinstance(report, AttendanceReport):
        tables.summary += _summary_rows(report.summary)
        tables.sections.append(
            TableSection(
                title="Attendance",
                headers=["Employee", "Days Present", "Total Hours", "Avg Daily Hours", "Attendance Rate %"],
                rows=[
                    _row(a.employee_name, a.days_present, a.total_work_hours, a.average_daily_hours, a.attendance_rate)
                    for a in report.employees
                ],
            )
        )
        tables.sections.append(
            TableSection(
                title="Daily Records",
                headers=["Employee", "Date", "First Seen", "Last Seen", "Work Hours", "Activity"],
                rows=[
                    _row(a.employee_name, r.date.isoformat(), r.first_seen, r.last_seen, r.work_hours, r.activity_count)
                    for a in report.employees
                    for r in a.records
                ],
            )
        )
    elif isinstance(report, ComprehensiveReport):
        tables.summary += _summary_rows(report.executive_summary)
        tables.sections.append(
            TableSection(
                title="Work Hours",
                headers=["Employee", "Work Hours", "Activity", "Cameras"],
                rows=[
                    _row(e.employee_name, e.total_work_hours, e.total_activity, e.cameras)
                    for e in report.employee_analytics.work_hours
                ],
            )
        )
        tables.sections.append(_violation_section(report.violation_analytics.violations))
        tables.sections.append(
            TableSection(
                title="Cameras",
                headers=["Camera", "Status", "Recordings", "Person", "Cell Phone", "Other", "Last Activity"],
                rows=[
                    _row(
                        c.camera,
                        c.status,
                        c.total_recordings,
                        c.detections.person,
                        c.detections.cell_phone,
                        c.detections.other,
                        c.last_activity,
                    )
                    for c in report.camera_analytics.cameras
                ],
            )
        )
    return tables
