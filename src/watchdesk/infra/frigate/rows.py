"""Raw row shapes returned by the Frigate timeline/recordings queries.

Timestamps are epoch seconds as Frigate stores them. Zone lists may arrive as
JSON text depending on the driver, so they are normalised here.
"""

import json
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, field_validator


def _zone_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


class _ZonedRow(BaseModel):
    zones: list[str] = []

    @field_validator("zones", mode="before")
    @classmethod
    def _parse_zones(cls, value: Any) -> list[str]:
        return _zone_list(value)


class PresenceRow(_ZonedRow):
    """One (employee, camera, zones) group of zone entries."""

    employee_name: Optional[str] = None
    camera: Optional[str] = None
    first_seen: float
    last_seen: float
    activity_count: int = 0


class ZoneExitRow(_ZonedRow):
    """A left_zone event with the timestamp of the same employee's previous exit."""

    employee_name: Optional[str] = None
    camera: Optional[str] = None
    left_at: float
    previous_activity: Optional[float] = None


class ViolationRow(_ZonedRow):
    event_id: Optional[str] = None
    timestamp: float
    camera: str
    employee_name: Optional[str] = None
    confidence: Optional[float] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _parse_confidence(cls, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class ActivityRow(_ZonedRow):
    employee_name: Optional[str] = None
    camera: Optional[str] = None
    hour_of_day: int
    day_of_week: int
    activity_count: int = 0


class CameraActivityRow(BaseModel):
    camera: str
    label: Optional[str] = None
    detections: int = 0
    last_seen: Optional[float] = None


class RecordingRow(BaseModel):
    camera: str
    total_recordings: int = 0
    last_recording: Optional[float] = None


class AttendanceRow(BaseModel):
    employee_name: Optional[str] = None
    attendance_date: date
    first_seen: float
    last_seen: float
    activity_count: int = 0
