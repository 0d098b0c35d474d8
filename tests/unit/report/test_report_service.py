"""Tests for ReportService: generation, persistence ordering, download and delete."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from watchdesk.db.models.report import ReportRecord
from watchdesk.db.repos.report_repo import ReportRepo
from watchdesk.db.session import Base, as_utc
from watchdesk.domain.enums import ReportFormat, ReportType
from watchdesk.domain.models.report import ReportFilters
from watchdesk.exceptions import NotFoundError, StorageError, UpstreamError, ValidationError
from watchdesk.report.artifacts import ArtifactStore
from watchdesk.report.cache import QueryCache
from watchdesk.report.data_collector import ReportDataCollector
from watchdesk.report.service import ReportService

NOW = datetime(2025, 10, 21, 9, 0, tzinfo=UTC)
ONE_DAY = ReportFilters(start_date="2025-10-20", end_date="2025-10-20")


@pytest.fixture()
def service(session_factory, frigate_source, reports_dir, clock):
    return ReportService(
        session_factory,
        ReportDataCollector(frigate_source),
        ArtifactStore(reports_dir),
        api_base_url="http://api.local:8000/",
        media_base_url="http://frigate.local:5000",
        clock=clock,
    )


@pytest.fixture()
async def shared_session_factory():
    # Sessions interleave on one connection; a reset on return would roll back
    # another session's pending write.
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        pool_reset_on_return=None,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(eng, expire_on_commit=False)
    await eng.dispose()


async def _stored(session_factory) -> list[ReportRecord]:
    async with session_factory() as session:
        return await ReportRepo(session).list_reports()


class TestGenerate:
    async def test_employee_summary_for_one_day(self, service, session_factory, reports_dir):
        result = await service.generate(ReportType.EMPLOYEE_SUMMARY, ONE_DAY)

        report = result.report
        assert report.report_type == "employee_summary"
        assert report.period.start == datetime(2025, 10, 20, tzinfo=UTC)
        assert report.summary.total_employees == 2

        meta = result.report_metadata
        assert meta.expires_at - meta.generated_at == timedelta(days=7)
        assert meta.download_count == 0

        report_id = meta.report_id
        assert result.download_urls == {
            "json": f"http://api.local:8000/api/reports/download/{report_id}.json",
        }
        assert (reports_dir / f"{report_id}.json").is_file()

        [record] = await _stored(session_factory)
        assert record.report_id == report_id
        assert as_utc(record.expires_at) == NOW + timedelta(days=7)
        assert record.summary["total_employees"] == 2
        assert record.filters["start_date"] == "2025-10-20"
        assert record.data["report_type"] == "employee_summary"

    async def test_file_size_is_primary_rendition(self, service, reports_dir):
        result = await service.generate("violation_report", ReportFilters(hours=24, format=ReportFormat.CSV))

        report_id = result.report_metadata.report_id
        assert set(result.download_urls) == {"json", "csv"}
        assert result.report_metadata.file_size == (reports_dir / f"{report_id}.csv").stat().st_size

    async def test_all_formats_use_excel_key(self, service):
        result = await service.generate(ReportType.COMPREHENSIVE_DASHBOARD, ReportFilters(format=ReportFormat.ALL))

        assert set(result.download_urls) == {"json", "csv", "pdf", "excel"}
        assert result.download_urls["excel"].endswith(".xlsx")
        assert result.report.executive_summary.system_health == "healthy"

    async def test_metadata_in_display_timezone(self, service):
        result = await service.generate(ReportType.ATTENDANCE_REPORT, ReportFilters(timezone="PKT"))

        assert result.report_metadata.generated_at.utcoffset() == timedelta(hours=5)
        assert result.report_metadata.generated_at == NOW

    async def test_filters_passed_to_source(self, service, frigate_source):
        await service.generate(ReportType.VIOLATION_REPORT, ReportFilters(employee_name="Alice", camera="cam1"))

        _, _, employee, camera = frigate_source.violations.await_args.args
        assert (employee, camera) == ("Alice", "cam1")

    @pytest.mark.parametrize("report_type", ["productivity_report", "custom_report", "weekly"])
    async def test_unsupported_type_rejected(self, service, session_factory, report_type):
        with pytest.raises(ValidationError):
            await service.generate(report_type, ONE_DAY)
        assert await _stored(session_factory) == []

    async def test_bad_timezone_rejected_before_collection(self, service, frigate_source):
        with pytest.raises(ValidationError):
            await service.generate(ReportType.EMPLOYEE_SUMMARY, ReportFilters(timezone="Mars/Olympus"))
        frigate_source.presence.assert_not_awaited()

    async def test_upstream_failure_persists_nothing(self, service, frigate_source, session_factory, reports_dir):
        frigate_source.presence.side_effect = UpstreamError("Analytics source unavailable")

        with pytest.raises(UpstreamError):
            await service.generate(ReportType.EMPLOYEE_SUMMARY, ONE_DAY)

        assert await _stored(session_factory) == []
        assert list(reports_dir.iterdir()) == []

    async def test_file_write_failure_removes_row(self, session_factory, frigate_source, tmp_path, clock):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        service = ReportService(
            session_factory,
            ReportDataCollector(frigate_source),
            ArtifactStore(blocker),
            api_base_url="http://api.local:8000",
            media_base_url="http://frigate.local:5000",
            clock=clock,
        )

        with pytest.raises(StorageError) as exc_info:
            await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)

        assert exc_info.value.message == "Failed to write report files"
        assert await _stored(session_factory) == []

    async def test_rolling_window_reuses_cached_rows(self, session_factory, frigate_source, reports_dir, clock):
        service = ReportService(
            session_factory,
            ReportDataCollector(frigate_source, QueryCache(session_factory)),
            ArtifactStore(reports_dir),
            api_base_url="http://api.local:8000",
            media_base_url="http://frigate.local:5000",
            clock=clock,
        )

        await service.generate(ReportType.VIOLATION_REPORT, ReportFilters(hours=24))
        clock.now = NOW + timedelta(seconds=25, microseconds=1234)
        await service.generate(ReportType.VIOLATION_REPORT, ReportFilters(hours=24))

        assert frigate_source.violations.await_count == 1


class TestReading:
    async def test_get_report_and_expiry(self, service, clock):
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        report_id = result.report_metadata.report_id

        record = await service.get_report(report_id)
        assert record.report_type == "violation_report"

        clock.now = NOW + timedelta(days=7)
        with pytest.raises(NotFoundError):
            await service.get_report(report_id)

    async def test_list_skips_expired(self, service, clock):
        old = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        clock.now = NOW + timedelta(days=3)
        new = await service.generate(ReportType.ATTENDANCE_REPORT, ONE_DAY)

        listed = await service.list_reports()
        assert [r.report_id for r in listed] == [new.report_metadata.report_id, old.report_metadata.report_id]

        clock.now = NOW + timedelta(days=8)
        listed = await service.list_reports()
        assert [r.report_id for r in listed] == [new.report_metadata.report_id]

    async def test_unknown_report(self, service):
        with pytest.raises(NotFoundError):
            await service.get_report("missing")


class TestDownload:
    async def test_download_counts(self, service):
        result = await service.generate(ReportType.VIOLATION_REPORT, ReportFilters(format=ReportFormat.PDF))
        report_id = result.report_metadata.report_id

        download = await service.open_download(f"{report_id}.pdf")
        assert download.content_type == "application/pdf"
        assert download.path.read_bytes().startswith(b"%PDF")

        await service.open_download(f"{report_id}.json")
        assert (await service.get_report(report_id)).download_count == 2

    async def test_counter_failure_does_not_block_download(self, service, monkeypatch):
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        report_id = result.report_metadata.report_id
        monkeypatch.setattr(
            ReportRepo,
            "increment_download_count",
            AsyncMock(side_effect=ConnectionRefusedError(111, "Connect call failed")),
        )

        download = await service.open_download(f"{report_id}.json")

        assert download.filename == f"{report_id}.json"
        assert download.path.is_file()
        monkeypatch.undo()
        assert (await service.get_report(report_id)).download_count == 0

    async def test_concurrent_downloads_are_all_counted(
        self, shared_session_factory, frigate_source, reports_dir, clock
    ):
        service = ReportService(
            shared_session_factory,
            ReportDataCollector(frigate_source),
            ArtifactStore(reports_dir),
            api_base_url="http://api.local:8000",
            media_base_url="http://frigate.local:5000",
            clock=clock,
        )
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        report_id = result.report_metadata.report_id

        await asyncio.gather(*(service._count_download(report_id) for _ in range(20)))

        assert (await service.get_report(report_id)).download_count == 20

    @pytest.mark.parametrize("suffix", [".csv", ".xlsx"])
    async def test_missing_rendition_not_found(self, service, suffix):
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)

        with pytest.raises(NotFoundError) as exc_info:
            await service.open_download(result.report_metadata.report_id + suffix)
        assert exc_info.value.message == "Report not found or expired"

    async def test_expired_not_found(self, service, clock):
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        clock.now = NOW + timedelta(days=8)

        with pytest.raises(NotFoundError) as exc_info:
            await service.open_download(result.report_metadata.report_id + ".json")
        assert exc_info.value.message == "Report not found or expired"

    @pytest.mark.parametrize("filename", ["../secret.json", "missing.json", ".json"])
    async def test_bad_or_unknown_name_not_found(self, service, filename):
        with pytest.raises(NotFoundError) as exc_info:
            await service.open_download(filename)
        assert exc_info.value.message == "Report not found or expired"


class TestDelete:
    async def test_delete_removes_row_and_files(self, service, session_factory, reports_dir):
        result = await service.generate(ReportType.VIOLATION_REPORT, ReportFilters(format=ReportFormat.PDF))
        report_id = result.report_metadata.report_id

        deleted = await service.delete_report(report_id)

        assert deleted.deleted_files == 2
        assert deleted.errors == []
        assert await _stored(session_factory) == []
        assert list(reports_dir.iterdir()) == []

    async def test_delete_unknown(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_report("missing")

    async def test_delete_without_files(self, service, reports_dir):
        result = await service.generate(ReportType.VIOLATION_REPORT, ONE_DAY)
        report_id = result.report_metadata.report_id
        (reports_dir / f"{report_id}.json").unlink()

        assert (await service.delete_report(report_id)).deleted_files == 0
