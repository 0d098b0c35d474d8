"""Reports API: generate, download, inspect and delete analytical reports."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from watchdesk.api.deps import get_report_service, get_sweeper
from watchdesk.api.schemas.common import Envelope
from watchdesk.api.schemas.reports import (
    DeleteReportResponse,
    ReportDetail,
    ReportList,
    ReportListItem,
    ReportTypeInfo,
    ReportTypesResponse,
    SweepResponse,
)
from watchdesk.db.models.report import ReportRecord
from watchdesk.db.session import as_utc
from watchdesk.domain.enums import REPORT_TYPE_DESCRIPTIONS, ReportFormat, ReportType
from watchdesk.domain.models.report import GeneratedReport, ReportFilters
from watchdesk.report.service import GENERATED_TYPES, ReportService
from watchdesk.report.timezones import COMMON_TIMEZONES, resolve_timezone
from watchdesk.workers.sweeper import RetentionSweeper

router = APIRouter(prefix="/api/reports", tags=["reports"])

ServiceDep = Annotated[ReportService, Depends(get_report_service)]


def report_filters(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601, UTC"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601, UTC"),
    hours: Optional[int] = Query(None, ge=1, le=720, description="Rolling window ending now"),
    employee_name: Optional[str] = Query(None),
    camera: Optional[str] = Query(None),
    timezone: str = Query("UTC", description="IANA name or common alias, display only"),
    format: ReportFormat = Query(ReportFormat.JSON),
    include_media: bool = Query(True),
    include_breakdown: bool = Query(True),
) -> ReportFilters:
    return ReportFilters(
        start_date=start_date,
        end_date=end_date,
        hours=hours,
        employee_name=employee_name,
        camera=camera,
        timezone=timezone,
        format=format,
        include_media=include_media,
        include_breakdown=include_breakdown,
    )


FiltersDep = Annotated[ReportFilters, Depends(report_filters)]


def _record_times(record: ReportRecord) -> dict:
    zone = resolve_timezone(record.timezone)
    return {
        "generated_at": as_utc(record.generated_at).astimezone(zone),
        "expires_at": as_utc(record.expires_at).astimezone(zone),
    }


# ── Generation ─────────────────────────────────────────────────


@router.get("/employee", response_model=Envelope[GeneratedReport])
async def employee_report(filters: FiltersDep, service: ServiceDep) -> Envelope[GeneratedReport]:
    result = await service.generate(ReportType.EMPLOYEE_SUMMARY, filters)
    return Envelope(message="Employee report generated successfully", data=result)


@router.get("/violations", response_model=Envelope[GeneratedReport])
async def violation_report(filters: FiltersDep, service: ServiceDep) -> Envelope[GeneratedReport]:
    result = await service.generate(ReportType.VIOLATION_REPORT, filters)
    return Envelope(message="Violation report generated successfully", data=result)


@router.get("/attendance", response_model=Envelope[GeneratedReport])
async def attendance_report(filters: FiltersDep, service: ServiceDep) -> Envelope[GeneratedReport]:
    result = await service.generate(ReportType.ATTENDANCE_REPORT, filters)
    return Envelope(message="Attendance report generated successfully", data=result)


@router.get("/comprehensive", response_model=Envelope[GeneratedReport])
async def comprehensive_report(filters: FiltersDep, service: ServiceDep) -> Envelope[GeneratedReport]:
    result = await service.generate(ReportType.COMPREHENSIVE_DASHBOARD, filters)
    return Envelope(message="Comprehensive report generated successfully", data=result)


@router.get("/types", response_model=Envelope[ReportTypesResponse])
async def report_types() -> Envelope[ReportTypesResponse]:
    types = [
        ReportTypeInfo(type=t.value, description=REPORT_TYPE_DESCRIPTIONS[t], available=t in GENERATED_TYPES)
        for t in ReportType
    ]
    return Envelope(
        message="Report types retrieved successfully",
        data=ReportTypesResponse(
            report_types=types,
            formats=[f.value for f in ReportFormat],
            timezones=COMMON_TIMEZONES,
        ),
    )


# ── Artifacts ──────────────────────────────────────────────────


@router.get("/download/{filename}")
async def download_report(filename: str, service: ServiceDep) -> FileResponse:
    download = await service.open_download(filename)
    return FileResponse(download.path, media_type=download.content_type, filename=download.filename)


@router.get("/metadata/{report_id}", response_model=Envelope[ReportDetail])
async def report_metadata(report_id: str, service: ServiceDep) -> Envelope[ReportDetail]:
    record = await service.get_report(report_id)
    detail = ReportDetail(
        report_id=record.report_id,
        report_type=record.report_type,
        timezone=record.timezone,
        filters=record.filters,
        summary=record.summary,
        data=record.data,
        file_size=record.file_size,
        download_count=record.download_count,
        created_at=record.created_at,
        updated_at=record.updated_at,
        **_record_times(record),
    )
    return Envelope(message="Report metadata retrieved successfully", data=detail)


@router.get("/list", response_model=Envelope[ReportList])
async def list_reports(
    service: ServiceDep,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> Envelope[ReportList]:
    records = await service.list_reports(limit=limit, offset=offset)
    items = [
        ReportListItem(
            report_id=r.report_id,
            report_type=r.report_type,
            timezone=r.timezone,
            file_size=r.file_size,
            download_count=r.download_count,
            download_url=service.download_urls(r.report_id, ["json"])["json"],
            **_record_times(r),
        )
        for r in records
    ]
    return Envelope(
        message="Reports list retrieved successfully",
        data=ReportList(reports=items, total=len(items), limit=limit, offset=offset),
    )


@router.delete("/delete/{report_id}", response_model=Envelope[DeleteReportResponse])
async def delete_report(report_id: str, service: ServiceDep) -> Envelope[DeleteReportResponse]:
    result = await service.delete_report(report_id)
    return Envelope(
        message=f"Report deleted successfully. {result.deleted_files} files removed.",
        data=DeleteReportResponse(deleted_files=result.deleted_files, errors=result.errors),
    )


@router.post("/cleanup", response_model=Envelope[SweepResponse])
async def cleanup(sweeper: Annotated[RetentionSweeper, Depends(get_sweeper)]) -> Envelope[SweepResponse]:
    result = await sweeper.sweep()
    return Envelope(message="Expired reports and cache entries removed", data=SweepResponse(**result.to_dict()))
