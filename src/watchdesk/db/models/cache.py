"""Expiring key/value cache for expensive analytics queries."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from watchdesk.db.session import Base, JSONType


class CacheEntry(Base):
    """Cached value keyed by string. Rows past expires_at are logically absent."""

    __tablename__ = "cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cache_key: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    cache_data: Mapped[Any] = mapped_column(JSONType)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
