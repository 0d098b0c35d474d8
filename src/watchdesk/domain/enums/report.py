from enum import Enum


class ReportType(str, Enum):
    """Kinds of report the service knows about."""

    EMPLOYEE_SUMMARY = "employee_summary"
    VIOLATION_REPORT = "violation_report"
    ATTENDANCE_REPORT = "attendance_report"
    PRODUCTIVITY_REPORT = "productivity_report"
    COMPREHENSIVE_DASHBOARD = "comprehensive_dashboard"
    CUSTOM_REPORT = "custom_report"


class ReportFormat(str, Enum):
    """Requested on-disk rendition. JSON is always written."""

    JSON = "json"
    CSV = "csv"
    PDF = "pdf"
    XLSX = "xlsx"
    ALL = "all"


REPORT_TYPE_DESCRIPTIONS: dict[ReportType, str] = {
    ReportType.EMPLOYEE_SUMMARY: "Detailed employee work hours, breaks, violations and attendance",
    ReportType.VIOLATION_REPORT: "Cell phone violations with media URLs and trends",
    ReportType.ATTENDANCE_REPORT: "Employee attendance patterns and daily presence",
    ReportType.PRODUCTIVITY_REPORT: "Productivity metrics and performance analysis",
    ReportType.COMPREHENSIVE_DASHBOARD: "Complete dashboard with employee, violation and camera metrics",
    ReportType.CUSTOM_REPORT: "Custom report based on specific criteria",
}
