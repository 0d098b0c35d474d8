"""RetentionSweeper: purges expired cache rows and expired report rows."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from watchdesk.db.errors import storage_errors
from watchdesk.db.repos.cache_repo import CacheRepo
from watchdesk.db.repos.report_repo import ReportRepo
from watchdesk.db.session import utcnow
from watchdesk.exceptions import WatchdeskError

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    cache_rows: int = 0
    report_rows: int = 0
    cache_failed: bool = False
    reports_failed: bool = False

    def to_dict(self) -> dict:
        return {
            "cache_rows_deleted": self.cache_rows,
            "report_rows_deleted": self.report_rows,
            "errors": [
                name
                for name, failed in (("cache", self.cache_failed), ("reports", self.reports_failed))
                if failed
            ],
        }


class RetentionSweeper:
    """Two independent purges; one failing never stops the other. Files on disk are left alone."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        now = now or utcnow()
        result = SweepResult()

        try:
            async with self._session_factory() as session:
                result.cache_rows = await CacheRepo(session).delete_expired(now)
                with storage_errors("commit cache sweep"):
                    await session.commit()
        except (WatchdeskError, OSError) as e:
            result.cache_failed = True
            logger.error("Cache sweep failed: %s", e)

        try:
            async with self._session_factory() as session:
                result.report_rows = await ReportRepo(session).delete_expired(now)
                with storage_errors("commit report sweep"):
                    await session.commit()
        except (WatchdeskError, OSError) as e:
            result.reports_failed = True
            logger.error("Report sweep failed: %s", e)

        if result.cache_rows or result.report_rows:
            logger.info("Sweep removed %d cache rows, %d report rows", result.cache_rows, result.report_rows)
        return result

    async def run_forever(self, interval_seconds: float) -> None:
        """Sweep on a fixed interval until cancelled. A failed pass is logged and retried next interval."""
        while True:
            try:
                await self.sweep()
            except Exception:
                logger.exception("Retention sweep pass failed")
            await asyncio.sleep(interval_seconds)
