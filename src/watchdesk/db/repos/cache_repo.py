from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from watchdesk.db.errors import storage_errors
from watchdesk.db.models.cache import CacheEntry
from watchdesk.db.session import utcnow
from watchdesk.exceptions import StorageError

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CacheRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def set(self, key: str, value: Any, ttl_seconds: int, now: Optional[datetime] = None) -> None:
        """Upsert: value and expiry are written by one statement."""
        expires_at = (now or utcnow()) + timedelta(seconds=ttl_seconds)
        dialect = self._session.bind.dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise StorageError(f"cache upsert not supported on {dialect}")

        stmt = insert(CacheEntry).values(cache_key=key, cache_data=value, expires_at=expires_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheEntry.cache_key],
            set_={"cache_data": stmt.excluded.cache_data, "expires_at": stmt.excluded.expires_at},
        )
        with storage_errors("cache set"):
            await self._session.execute(stmt)

    async def get(self, key: str, now: Optional[datetime] = None) -> Optional[Any]:
        """Return the cached value, or None when the key is missing or expired."""
        with storage_errors("cache get"):
            result = await self._session.execute(
                select(CacheEntry.cache_data).where(
                    CacheEntry.cache_key == key,
                    CacheEntry.expires_at > (now or utcnow()),
                )
            )
            return result.scalar_one_or_none()

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        with storage_errors("delete expired cache"):
            result = await self._session.execute(
                delete(CacheEntry)
                .where(CacheEntry.expires_at <= (now or utcnow()))
                .execution_options(synchronize_session=False)
            )
        return result.rowcount or 0
