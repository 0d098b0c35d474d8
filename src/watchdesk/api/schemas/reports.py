"""Schemas for /api/reports endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ReportListItem(BaseModel):
    report_id: str
    report_type: str
    generated_at: datetime
    expires_at: datetime
    timezone: str
    file_size: int
    download_count: int
    download_url: str


class ReportList(BaseModel):
    reports: list[ReportListItem]
    total: int
    limit: int
    offset: int


class ReportDetail(BaseModel):
    report_id: str
    report_type: str
    generated_at: datetime
    expires_at: datetime
    timezone: str
    filters: dict[str, Any]
    summary: dict[str, Any]
    data: dict[str, Any]
    file_size: int
    download_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeleteReportResponse(BaseModel):
    deleted_files: int
    errors: list[str]


class SweepResponse(BaseModel):
    cache_rows_deleted: int
    report_rows_deleted: int
    errors: list[str]


class ReportTypeInfo(BaseModel):
    type: str
    description: str
    available: bool


class ReportTypesResponse(BaseModel):
    report_types: list[ReportTypeInfo]
    formats: list[str]
    timezones: dict[str, str]
