"""Typed report bodies.

Every report shares a header (id, timestamps, timezone, period, filters) and is
tagged by ``report_type``; ``ReportBody`` is the discriminated union of all
bodies that have a generator. Timestamps inside a body are rendered in the
requested display timezone before serialization.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from watchdesk.domain.enums import ReportFormat
from watchdesk.domain.models.analytics import (
    ActivityPattern,
    BreakStats,
    CameraSummary,
    EmployeeActivity,
    EmployeeAttendance,
    Violation,
)


class ReportFilters(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    hours: Optional[int] = Field(default=None, ge=1, le=720)
    employee_name: Optional[str] = None
    camera: Optional[str] = None
    timezone: str = "UTC"
    format: ReportFormat = ReportFormat.JSON
    include_media: bool = True
    include_breakdown: bool = True


class ReportPeriod(BaseModel):
    start: datetime
    end: datetime
    duration_hours: float


class TimezoneInfo(BaseModel):
    timezone: str
    offset: str
    offset_minutes: int
    is_dst: bool
    abbreviation: Optional[str] = None
    current_time: str


class ReportHeader(BaseModel):
    report_id: str
    generated_at: datetime
    generated_by: str = "system"
    timezone: str
    timezone_info: TimezoneInfo
    period: ReportPeriod
    filters: ReportFilters

    def summary_payload(self) -> dict:
        return self.summary.model_dump(mode="json")


# Media links


class ViolationMedia(BaseModel):
    snapshot: Optional[str] = None
    thumbnail: Optional[str] = None
    video: Optional[str] = None


class EmployeeMedia(BaseModel):
    profile_snapshot: Optional[str] = None
    violation_media: list[ViolationMedia] = []


# Employee summary


class EmployeeBreakdown(BaseModel):
    hours_by_camera: dict[str, float] = {}
    session_count: int = 0
    average_session_duration: float = 0.0
    break_count: int = 0
    total_break_time: float = 0.0


class EmployeeEntry(EmployeeActivity):
    break_data: Optional[BreakStats] = None
    violations: list[Violation] = []
    activity_patterns: Optional[ActivityPattern] = None
    media_urls: Optional[EmployeeMedia] = None
    breakdown: Optional[EmployeeBreakdown] = None


class EmployeeSummary(BaseModel):
    total_employees: int = 0
    total_work_hours: float = 0.0
    average_work_hours: float = 0.0
    total_violations: int = 0
    average_productivity: Optional[float] = None
    attendance_rate: float = 0.0


class ProductivityPoint(BaseModel):
    employee: str
    productivity: Optional[float] = None
    work_hours: float


class ViolationPoint(BaseModel):
    timestamp: datetime
    employee: Optional[str] = None
    camera: str
    confidence: Optional[float] = None


class AttendancePoint(BaseModel):
    employee: str
    present: bool
    work_hours: float


class EmployeeCharts(BaseModel):
    productivity_trend: list[ProductivityPoint] = []
    violation_trend: list[ViolationPoint] = []
    attendance_pattern: list[AttendancePoint] = []
    hourly_activity: dict[int, int] = {}


class EmployeeSummaryReport(ReportHeader):
    report_type: Literal["employee_summary"] = "employee_summary"
    summary: EmployeeSummary
    employees: list[EmployeeEntry] = []
    charts: EmployeeCharts = EmployeeCharts()


# Violations


class ViolationTimeline(BaseModel):
    detected_at: datetime


class ViolationContext(BaseModel):
    camera: str
    zones: list[str] = []
    confidence: Optional[float] = None


class ViolationEntry(Violation):
    media_urls: Optional[ViolationMedia] = None
    timeline: Optional[ViolationTimeline] = None
    context: Optional[ViolationContext] = None


class ViolationSummary(BaseModel):
    total_violations: int = 0
    by_employee: dict[str, int] = {}
    by_camera: dict[str, int] = {}
    most_violated_employee: Optional[str] = None
    most_violated_camera: Optional[str] = None


class ViolationTrends(BaseModel):
    daily: dict[str, int] = {}
    hourly: dict[int, int] = {}
    by_employee: dict[str, int] = {}


class ViolationReport(ReportHeader):
    report_type: Literal["violation_report"] = "violation_report"
    summary: ViolationSummary
    violations: list[ViolationEntry] = []
    trends: ViolationTrends = ViolationTrends()


# Attendance


class AttendanceSummary(BaseModel):
    total_employees: int = 0
    period_days: int = 0
    overall_attendance_rate: float = 0.0


class AttendanceReport(ReportHeader):
    report_type: Literal["attendance_report"] = "attendance_report"
    summary: AttendanceSummary
    employees: list[EmployeeAttendance] = []


# Comprehensive dashboard


class ExecutiveSummary(BaseModel):
    total_employees: int = 0
    total_work_hours: float = 0.0
    average_productivity: Optional[float] = None
    total_violations: int = 0
    attendance_rate: float = 0.0
    system_health: str = "degraded"


class EmployeeAnalytics(BaseModel):
    work_hours: list[EmployeeActivity] = []
    break_time: list[BreakStats] = []
    activity_patterns: list[ActivityPattern] = []


class ViolationAnalytics(BaseModel):
    total_violations: int = 0
    violations: list[ViolationEntry] = []
    hotspots: dict[str, int] = {}


class CameraAnalytics(BaseModel):
    total_cameras: int = 0
    cameras: list[CameraSummary] = []


class ComprehensiveReport(ReportHeader):
    report_type: Literal["comprehensive_dashboard"] = "comprehensive_dashboard"
    executive_summary: ExecutiveSummary
    employee_analytics: EmployeeAnalytics = EmployeeAnalytics()
    violation_analytics: ViolationAnalytics = ViolationAnalytics()
    camera_analytics: CameraAnalytics = CameraAnalytics()

    def summary_payload(self) -> dict:
        return self.executive_summary.model_dump(mode="json")


ReportBody = Annotated[
    Union[EmployeeSummaryReport, ViolationReport, AttendanceReport, ComprehensiveReport],
    Field(discriminator="report_type"),
]


class ReportMetadata(BaseModel):
    report_id: str
    generated_at: datetime
    expires_at: datetime
    file_size: int = 0
    download_count: int = 0


class GeneratedReport(BaseModel):
    report: ReportBody
    download_urls: dict[str, str]
    report_metadata: ReportMetadata
