"""Display timezone resolution.

Reports are computed over UTC windows; the requested timezone only changes how
timestamps are rendered.
"""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from watchdesk.domain.models.report import TimezoneInfo
from watchdesk.exceptions import ValidationError

COMMON_TIMEZONES: dict[str, str] = {
    "UTC": "UTC",
    "GMT": "Europe/London",
    "EST": "America/New_York",
    "CST": "America/Chicago",
    "MST": "America/Denver",
    "PST": "America/Los_Angeles",
    "CET": "Europe/Paris",
    "IST": "Asia/Kolkata",
    "PKT": "Asia/Karachi",
    "UAE": "Asia/Dubai",
    "SGT": "Asia/Singapore",
    "HKT": "Asia/Hong_Kong",
    "JST": "Asia/Tokyo",
    "KST": "Asia/Seoul",
    "AEST": "Australia/Sydney",
}


def resolve_timezone(label: str) -> ZoneInfo:
    """Map an alias or IANA name to a ZoneInfo, raising ValidationError if unknown."""
    name = COMMON_TIMEZONES.get(label.strip().upper(), label.strip()) if label else ""
    if not name:
        raise ValidationError("Invalid timezone", [f"timezone: {label!r} is not a known timezone"])
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError("Invalid timezone", [f"timezone: {label!r} is not a known timezone"]) from e


def _format_offset(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def timezone_info(zone: ZoneInfo, at: datetime) -> TimezoneInfo:
    local = at.astimezone(zone)
    offset = local.utcoffset()
    offset_minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    dst = local.dst()
    return TimezoneInfo(
        timezone=zone.key,
        offset=_format_offset(offset_minutes),
        offset_minutes=offset_minutes,
        is_dst=bool(dst),
        abbreviation=local.tzname(),
        current_time=local.strftime("%Y-%m-%d %H:%M:%S"),
    )
