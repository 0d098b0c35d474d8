"""ReportService: orchestrates report generation, download and deletion."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from watchdesk.db.errors import storage_errors
from watchdesk.db.models.report import ReportRecord
from watchdesk.db.repos.report_repo import ReportRepo
from watchdesk.db.session import as_utc, utcnow
from watchdesk.domain.enums import ReportType
from watchdesk.domain.models.report import GeneratedReport, ReportFilters, ReportHeader, ReportMetadata
from watchdesk.exceptions import NotFoundError, StorageError, ValidationError
from watchdesk.report.artifacts import ArtifactStore, content_type_for, is_safe_filename
from watchdesk.report.builders import (
    ReportContext,
    build_attendance_report,
    build_comprehensive_report,
    build_employee_summary,
    build_violation_report,
)
from watchdesk.report.data_collector import ReportDataCollector
from watchdesk.report.renderers import DOWNLOAD_KEYS, primary_extension, render_report
from watchdesk.report.timewindow import resolve_window
from watchdesk.report.timezones import resolve_timezone

logger = logging.getLogger(__name__)

REPORT_RETENTION = timedelta(days=7)

NOT_FOUND_MESSAGE = "Report not found or expired"

GENERATED_TYPES = (
    ReportType.EMPLOYEE_SUMMARY,
    ReportType.VIOLATION_REPORT,
    ReportType.ATTENDANCE_REPORT,
    ReportType.COMPREHENSIVE_DASHBOARD,
)


@dataclass(frozen=True)
class Download:
    path: Path
    filename: str
    content_type: str


@dataclass
class DeleteResult:
    deleted_files: int = 0
    errors: list[str] = field(default_factory=list)


class ReportService:
    """Orchestrates collection → typed body → renditions → metadata row → files.

    The metadata row is committed before any file is written; a row whose file
    is missing is answered as not found on download.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        collector: ReportDataCollector,
        artifacts: ArtifactStore,
        api_base_url: str,
        media_base_url: str,
        default_window_hours: int = 24,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._collector = collector
        self._artifacts = artifacts
        self._api_base_url = api_base_url.rstrip("/")
        self._media_base_url = media_base_url
        self._default_window_hours = default_window_hours
        self._clock = clock

    # ── Generation ─────────────────────────────────────────────

    async def generate(self, report_type: ReportType | str, filters: ReportFilters) -> GeneratedReport:
        report_type = self._check_type(report_type)
        zone = resolve_timezone(filters.timezone)
        generated_at = self._clock()
        window = resolve_window(
            filters.start_date,
            filters.end_date,
            filters.hours,
            default_hours=self._default_window_hours,
            now=generated_at,
        )
        ctx = ReportContext(
            report_id=str(uuid.uuid4()),
            generated_at=generated_at,
            window=window,
            filters=filters,
            zone=zone,
            media_base_url=self._media_base_url,
        )

        body = await self._build(report_type, ctx)
        renditions = render_report(body, filters.format)
        expires_at = generated_at + REPORT_RETENTION
        file_size = len(renditions[primary_extension(filters.format)])

        record = ReportRecord(
            report_id=ctx.report_id,
            report_type=report_type.value,
            generated_at=generated_at,
            expires_at=expires_at,
            timezone=filters.timezone,
            filters=filters.model_dump(mode="json"),
            summary=body.summary_payload(),
            data=body.model_dump(mode="json"),
            file_size=file_size,
            download_count=0,
        )
        async with self._session_factory() as session:
            await ReportRepo(session).save(record)
            with storage_errors("commit report"):
                await session.commit()

        try:
            self._artifacts.write(ctx.report_id, renditions)
        except StorageError:
            await self._discard(ctx.report_id)
            raise

        logger.info(
            "Report generated: %s (%s, %s → %s, formats=%s)",
            ctx.report_id, report_type.value, window.start.isoformat(), window.end.isoformat(),
            ",".join(renditions),
        )
        return GeneratedReport(
            report=body,
            download_urls=self.download_urls(ctx.report_id, renditions),
            report_metadata=ReportMetadata(
                report_id=ctx.report_id,
                generated_at=generated_at.astimezone(zone),
                expires_at=expires_at.astimezone(zone),
                file_size=file_size,
                download_count=0,
            ),
        )

    def download_urls(self, report_id: str, extensions: Iterable[str]) -> dict[str, str]:
        return {
            DOWNLOAD_KEYS[ext]: f"{self._api_base_url}/api/reports/download/{report_id}.{ext}"
            for ext in extensions
        }

    @staticmethod
    def _check_type(report_type: ReportType | str) -> ReportType:
        try:
            report_type = ReportType(report_type)
        except ValueError as e:
            raise ValidationError("Unknown report type", [f"report_type: {report_type!r}"]) from e
        if report_type not in GENERATED_TYPES:
            raise ValidationError("Report type not supported", [f"report_type: {report_type.value} has no generator"])
        return report_type

    async def _build(self, report_type: ReportType, ctx: ReportContext) -> ReportHeader:
        collector = self._collector
        window = ctx.window
        employee, camera = ctx.filters.employee_name, ctx.filters.camera

        if report_type == ReportType.VIOLATION_REPORT:
            violations = await collector.violations(window, employee, camera)
            return build_violation_report(ctx, violations)

        if report_type == ReportType.ATTENDANCE_REPORT:
            attendance = await collector.attendance(window, employee)
            return build_attendance_report(ctx, attendance)

        activity = await collector.employee_activity(window, employee, camera)
        breaks = await collector.break_stats(window, employee, camera)
        violations = await collector.violations(window, employee, camera)
        patterns = await collector.activity_patterns(window, employee, camera)
        if report_type == ReportType.EMPLOYEE_SUMMARY:
            return build_employee_summary(ctx, activity, breaks, violations, patterns)

        cameras = await collector.camera_summaries(window)
        return build_comprehensive_report(ctx, activity, breaks, violations, patterns, cameras)

    async def _discard(self, report_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await ReportRepo(session).delete(report_id)
                with storage_errors("commit report discard"):
                    await session.commit()
        except (StorageError, OSError):
            logger.error("Could not remove metadata of unwritten report %s", report_id)

    # ── Reading ────────────────────────────────────────────────

    async def get_report(self, report_id: str) -> ReportRecord:
        """The report row; expired rows are treated as missing."""
        async with self._session_factory() as session:
            record = await ReportRepo(session).get(report_id)
        if record is None or as_utc(record.expires_at) <= self._clock():
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return record

    async def list_reports(self, limit: int = 50, offset: int = 0) -> list[ReportRecord]:
        async with self._session_factory() as session:
            return await ReportRepo(session).list_reports(limit=limit, offset=offset, active_at=self._clock())

    async def open_download(self, filename: str) -> Download:
        """Resolve a download. Bad name, missing row, expired row and missing file look the same."""
        if not is_safe_filename(filename):
            raise NotFoundError(NOT_FOUND_MESSAGE)
        report_id = Path(filename).stem

        record = await self.get_report(report_id)
        path = self._artifacts.resolve(filename)
        if path is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        await self._count_download(record.report_id)
        return Download(path=path, filename=filename, content_type=content_type_for(filename))

    async def _count_download(self, report_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await ReportRepo(session).increment_download_count(report_id)
                with storage_errors("commit download count"):
                    await session.commit()
        except (StorageError, OSError):
            logger.warning("Download counter not updated for %s", report_id)

    # ── Deletion ───────────────────────────────────────────────

    async def delete_report(self, report_id: str) -> DeleteResult:
        """Remove the row, then every rendition file that exists."""
        async with self._session_factory() as session:
            deleted = await ReportRepo(session).delete(report_id)
            with storage_errors("commit report delete"):
                await session.commit()
        if not deleted:
            raise NotFoundError("Report not found")

        deleted_files, errors = self._artifacts.remove(report_id)
        logger.info("Report %s deleted (%d files)", report_id, deleted_files)
        return DeleteResult(deleted_files=deleted_files, errors=errors)
