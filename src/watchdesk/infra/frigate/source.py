"""FrigateSource: read-only queries against the Frigate PostgreSQL database."""

import logging
from datetime import datetime
from typing import Optional, TypeVar

import pydantic
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from watchdesk.exceptions import UpstreamError
from watchdesk.infra.frigate.rows import (
    ActivityRow,
    AttendanceRow,
    CameraActivityRow,
    PresenceRow,
    RecordingRow,
    ViolationRow,
    ZoneExitRow,
)

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=pydantic.BaseModel)

EMPLOYEE = "data->'sub_label'->>0"


def _where(
    start: datetime,
    end: datetime,
    employee_name: Optional[str] = None,
    camera: Optional[str] = None,
    *conditions: str,
) -> tuple[str, dict]:
    """Build a WHERE clause over the timeline table with bound parameters."""
    clauses = ["timestamp >= :start", "timestamp <= :end", *conditions]
    params: dict = {"start": start.timestamp(), "end": end.timestamp()}
    if employee_name:
        clauses.append(f"{EMPLOYEE} = :employee_name")
        params["employee_name"] = employee_name
    if camera:
        clauses.append("camera = :camera")
        params["camera"] = camera
    return "WHERE " + " AND ".join(clauses), params


class FrigateSource:
    """Executes the timeline/recordings queries and parses rows into typed models.

    Every query opens its own session from the Frigate pool. Connection-level
    failures are retried; anything still failing surfaces as UpstreamError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ── Employees ──────────────────────────────────────────────

    async def presence(
        self,
        start: datetime,
        end: datetime,
        employee_name: Optional[str] = None,
        camera: Optional[str] = None,
    ) -> list[PresenceRow]:
        where, params = _where(
            start, end, employee_name, camera,
            "class_type = 'entered_zone'",
            "data->>'label' = 'person'",
        )
        sql = f"""
            SELECT
                {EMPLOYEE} AS employee_name,
                camera,
                data->'zones' AS zones,
                MIN(timestamp) AS first_seen,
                MAX(timestamp) AS last_seen,
                COUNT(*) AS activity_count
            FROM timeline
            {where}
            GROUP BY {EMPLOYEE}, camera, data->'zones'
            ORDER BY first_seen DESC
        """
        return await self._fetch(sql, params, PresenceRow)

    async def zone_exits(
        self,
        start: datetime,
        end: datetime,
        employee_name: Optional[str] = None,
        camera: Optional[str] = None,
    ) -> list[ZoneExitRow]:
        where, params = _where(
            start, end, employee_name, camera,
            "class_type = 'left_zone'",
            "data->>'label' = 'person'",
        )
        sql = f"""
            SELECT
                {EMPLOYEE} AS employee_name,
                camera,
                data->'zones' AS zones,
                timestamp AS left_at,
                LAG(timestamp) OVER (PARTITION BY {EMPLOYEE} ORDER BY timestamp) AS previous_activity
            FROM timeline
            {where}
            ORDER BY {EMPLOYEE}, timestamp
        """
        return await self._fetch(sql, params, ZoneExitRow)

    async def activity(
        self,
        start: datetime,
        end: datetime,
        employee_name: Optional[str] = None,
        camera: Optional[str] = None,
    ) -> list[ActivityRow]:
        where, params = _where(
            start, end, employee_name, camera,
            "data->>'label' = 'person'",
            f"{EMPLOYEE} IS NOT NULL",
        )
        sql = f"""
            SELECT
                {EMPLOYEE} AS employee_name,
                camera,
                data->'zones' AS zones,
                EXTRACT(HOUR FROM to_timestamp(timestamp))::int AS hour_of_day,
                EXTRACT(DOW FROM to_timestamp(timestamp))::int AS day_of_week,
                COUNT(*) AS activity_count
            FROM timeline
            {where}
            GROUP BY {EMPLOYEE}, camera, data->'zones',
                     EXTRACT(HOUR FROM to_timestamp(timestamp)),
                     EXTRACT(DOW FROM to_timestamp(timestamp))
            ORDER BY {EMPLOYEE}, hour_of_day, day_of_week
        """
        return await self._fetch(sql, params, ActivityRow)

    async def attendance(
        self,
        start: datetime,
        end: datetime,
        employee_name: Optional[str] = None,
    ) -> list[AttendanceRow]:
        where, params = _where(
            start, end, employee_name, None,
            "class_type = 'entered_zone'",
            "data->>'label' = 'person'",
        )
        sql = f"""
            SELECT
                {EMPLOYEE} AS employee_name,
                DATE(to_timestamp(timestamp) AT TIME ZONE 'UTC') AS attendance_date,
                MIN(timestamp) AS first_seen,
                MAX(timestamp) AS last_seen,
                COUNT(*) AS activity_count
            FROM timeline
            {where}
            GROUP BY {EMPLOYEE}, DATE(to_timestamp(timestamp) AT TIME ZONE 'UTC')
            ORDER BY attendance_date DESC, {EMPLOYEE}
        """
        return await self._fetch(sql, params, AttendanceRow)

    # ── Violations ─────────────────────────────────────────────

    async def violations(
        self,
        start: datetime,
        end: datetime,
        employee_name: Optional[str] = None,
        camera: Optional[str] = None,
    ) -> list[ViolationRow]:
        where, params = _where(start, end, employee_name, camera, "data->>'label' = 'cell phone'")
        sql = f"""
            SELECT
                source_id AS event_id,
                timestamp,
                camera,
                {EMPLOYEE} AS employee_name,
                data->'sub_label'->>1 AS confidence,
                data->'zones' AS zones
            FROM timeline
            {where}
            ORDER BY timestamp DESC
        """
        return await self._fetch(sql, params, ViolationRow)

    # ── Cameras ────────────────────────────────────────────────

    async def camera_activity(self, start: datetime, end: datetime) -> list[CameraActivityRow]:
        where, params = _where(start, end)
        sql = f"""
            SELECT
                camera,
                data->>'label' AS label,
                COUNT(*) AS detections,
                MAX(timestamp) AS last_seen
            FROM timeline
            {where}
            GROUP BY camera, data->>'label'
            ORDER BY camera, detections DESC
        """
        return await self._fetch(sql, params, CameraActivityRow)

    async def recordings(self, start: datetime, end: datetime) -> list[RecordingRow]:
        sql = """
            SELECT
                camera,
                COUNT(*) AS total_recordings,
                MAX(start_time) AS last_recording
            FROM recordings
            WHERE start_time >= :start AND start_time <= :end
            GROUP BY camera
        """
        return await self._fetch(sql, {"start": start.timestamp(), "end": end.timestamp()}, RecordingRow)

    async def cameras(self) -> list[str]:
        rows = await self._execute("SELECT DISTINCT camera FROM recordings ORDER BY camera", {})
        return [row["camera"] for row in rows if row.get("camera")]

    # ── Execution ──────────────────────────────────────────────

    async def _fetch(self, sql: str, params: dict, row_type: type[RowT]) -> list[RowT]:
        rows = await self._execute(sql, params)
        try:
            return [row_type.model_validate(row) for row in rows]
        except pydantic.ValidationError as e:
            logger.error("Unparsable %s rows from Frigate: %s", row_type.__name__, e)
            raise UpstreamError("Analytics source returned unparsable rows") from e

    async def _execute(self, sql: str, params: dict) -> list[dict]:
        try:
            return await self._query(sql, params)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Frigate query failed: %s", e)
            raise UpstreamError("Analytics source unavailable") from e

    @retry(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        reraise=True,
    )
    async def _query(self, sql: str, params: dict) -> list[dict]:
        async with self._session_factory() as session:
            result = await session.execute(text(sql), params)
            return [dict(row) for row in result.mappings().all()]
