"""QueryCache: best-effort read-through cache over the cache table."""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from watchdesk.db.errors import storage_errors
from watchdesk.db.repos.cache_repo import CacheRepo
from watchdesk.exceptions import StorageError

logger = logging.getLogger(__name__)


class QueryCache:
    """A cache outage never fails a report: reads degrade to misses, writes to no-ops."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], ttl_seconds: int = 3600) -> None:
        self._session_factory = session_factory
        self._ttl_seconds = ttl_seconds

    async def get(self, key: str) -> Optional[Any]:
        try:
            async with self._session_factory() as session:
                return await CacheRepo(session).get(key)
        except (StorageError, OSError):
            logger.warning("Cache read failed for %s, treating as miss", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        try:
            async with self._session_factory() as session:
                await CacheRepo(session).set(key, value, ttl_seconds or self._ttl_seconds)
                with storage_errors("cache commit"):
                    await session.commit()
        except (StorageError, OSError):
            logger.warning("Cache write failed for %s", key)
