from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from watchdesk.db.errors import storage_errors
from watchdesk.db.models.report import ReportRecord
from watchdesk.db.session import utcnow


class ReportRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, record: ReportRecord) -> int:
        """Insert a new report row. Raises ConflictError if report_id is taken."""
        with storage_errors("save report"):
            self._session.add(record)
            await self._session.flush()
        return record.id

    async def get(self, report_id: str) -> Optional[ReportRecord]:
        with storage_errors("get report"):
            result = await self._session.execute(
                select(ReportRecord).where(ReportRecord.report_id == report_id)
            )
            return result.scalar_one_or_none()

    async def list_reports(
        self,
        limit: int = 50,
        offset: int = 0,
        active_at: Optional[datetime] = None,
    ) -> list[ReportRecord]:
        """Most recently generated first. With active_at, expired rows are left out."""
        stmt = select(ReportRecord)
        if active_at is not None:
            stmt = stmt.where(ReportRecord.expires_at > active_at)
        stmt = stmt.order_by(ReportRecord.generated_at.desc(), ReportRecord.id.desc()).limit(limit).offset(offset)
        with storage_errors("list reports"):
            result = await self._session.execute(stmt)
            return list(result.scalars().all())

    async def increment_download_count(self, report_id: str) -> None:
        """Atomic in-database increment; unknown ids are silently ignored."""
        with storage_errors("increment download count"):
            await self._session.execute(
                update(ReportRecord)
                .where(ReportRecord.report_id == report_id)
                .values(download_count=ReportRecord.download_count + 1, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )

    async def delete(self, report_id: str) -> bool:
        with storage_errors("delete report"):
            result = await self._session.execute(
                delete(ReportRecord)
                .where(ReportRecord.report_id == report_id)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Remove every row whose expiry has passed. Returns the number removed."""
        cutoff = now or utcnow()
        with storage_errors("delete expired reports"):
            result = await self._session.execute(
                delete(ReportRecord)
                .where(ReportRecord.expires_at <= cutoff)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount or 0
