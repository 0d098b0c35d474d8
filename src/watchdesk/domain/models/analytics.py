"""Per-employee and per-camera aggregates assembled from Frigate timeline rows."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class WorkSession(BaseModel):
    """Continuous presence of one employee on one camera/zone set."""

    camera: Optional[str] = None
    zones: list[str] = []
    first_seen: datetime
    last_seen: datetime
    duration_hours: float
    activity_count: int


class EmployeeActivity(BaseModel):
    """Work-hour aggregate for one employee over the report window."""

    employee_name: str
    total_work_hours: float = 0.0
    total_activity: int = 0
    cameras: list[str] = []
    zones: list[str] = []
    sessions: list[WorkSession] = []
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    average_session_duration: float = 0.0
    productivity_score: Optional[float] = None  # opaque upstream value, never computed here


class BreakSession(BaseModel):
    camera: Optional[str] = None
    zones: list[str] = []
    break_time: datetime
    previous_activity: datetime
    duration_hours: float


class BreakStats(BaseModel):
    """Zone exits of one employee, measured from the preceding exit."""

    employee_name: str
    total_breaks: int = 0
    total_break_time: float = 0.0
    average_break_duration: float = 0.0
    longest_break: float = 0.0
    shortest_break: float = 0.0
    break_frequency: float = 0.0  # breaks per window hour
    break_sessions: list[BreakSession] = []


class Violation(BaseModel):
    """A cell phone detection attributed (or not) to an employee."""

    event_id: Optional[str] = None
    timestamp: datetime
    camera: str
    employee_name: Optional[str] = None
    confidence: Optional[float] = None
    zones: list[str] = []


class ActivityPattern(BaseModel):
    """Activity counts per hour of day, day of week (0 = Sunday), camera and zone."""

    employee_name: str
    hourly_patterns: dict[int, int] = {}
    daily_patterns: dict[int, int] = {}
    camera_preferences: dict[str, int] = {}
    zone_preferences: dict[str, int] = {}


class DetectionCounts(BaseModel):
    person: int = 0
    cell_phone: int = 0
    other: int = 0
    total: int = 0


class CameraSummary(BaseModel):
    camera: str
    status: str  # active (has recordings in window) / inactive
    last_activity: Optional[datetime] = None
    last_recording: Optional[datetime] = None
    total_recordings: int = 0
    detections: DetectionCounts = DetectionCounts()


class AttendanceDay(BaseModel):
    date: date
    first_seen: datetime
    last_seen: datetime
    work_hours: float
    activity_count: int


class EmployeeAttendance(BaseModel):
    employee_name: str
    days_present: int = 0
    total_work_hours: float = 0.0
    average_daily_hours: float = 0.0
    attendance_rate: float = 0.0  # percent of window days with presence
    records: list[AttendanceDay] = []
