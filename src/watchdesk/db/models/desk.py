from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from watchdesk.db.session import Base, TimestampMixin
from watchdesk.domain.enums import DeskStatus


class DeskAssignment(TimestampMixin, Base):
    """Which employee sits at which numbered desk (and which camera covers it)."""

    __tablename__ = "desk_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    desk_number: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[str] = mapped_column(String(20), default=DeskStatus.ACTIVE.value)
    camera: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    notes: Mapped[Optional[str]] = mapped_column(Text, default=None)
