from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from watchdesk.db.errors import storage_errors
from watchdesk.db.models.desk import DeskAssignment
from watchdesk.domain.enums import DeskStatus

SORTABLE_FIELDS = ("desk_number", "employee_name", "status", "created_at")
NULLABLE_FIELDS = ("camera", "notes")


class DeskRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_page(
        self,
        page: int = 1,
        limit: int = 100,
        sort_field: str = "desk_number",
        descending: bool = False,
        status: Optional[DeskStatus] = None,
    ) -> tuple[list[DeskAssignment], int]:
        """Return one page of desks and the total number of matching desks."""
        column = getattr(DeskAssignment, sort_field)
        base = select(DeskAssignment)
        count_q = select(func.count()).select_from(DeskAssignment)
        if status is not None:
            base = base.where(DeskAssignment.status == status.value)
            count_q = count_q.where(DeskAssignment.status == status.value)

        with storage_errors("list desks"):
            total = (await self._session.execute(count_q)).scalar_one()
            result = await self._session.execute(
                base.order_by(column.desc() if descending else column.asc())
                .limit(limit)
                .offset((page - 1) * limit)
            )
            return list(result.scalars().all()), total

    async def get_by_number(self, desk_number: int) -> Optional[DeskAssignment]:
        with storage_errors("get desk"):
            result = await self._session.execute(
                select(DeskAssignment).where(DeskAssignment.desk_number == desk_number)
            )
            return result.scalar_one_or_none()

    async def get_by_employee(self, employee_name: str) -> Optional[DeskAssignment]:
        with storage_errors("get employee desk"):
            result = await self._session.execute(
                select(DeskAssignment)
                .where(DeskAssignment.employee_name == employee_name)
                .order_by(DeskAssignment.desk_number)
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def create(
        self,
        desk_number: int,
        employee_name: str,
        status: DeskStatus = DeskStatus.ACTIVE,
        camera: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> DeskAssignment:
        """Create a desk. Raises ConflictError if the desk number is taken."""
        desk = DeskAssignment(
            desk_number=desk_number,
            employee_name=employee_name,
            status=status.value,
            camera=camera,
            notes=notes,
        )
        with storage_errors("create desk"):
            self._session.add(desk)
            await self._session.flush()
        return desk

    async def update(self, desk_number: int, **kwargs) -> Optional[DeskAssignment]:
        """Update desk fields with matching attributes.

        None clears ``camera`` and ``notes``; for required fields it means "leave unchanged".
        """
        desk = await self.get_by_number(desk_number)
        if desk is None:
            return None
        for key, value in kwargs.items():
            if not hasattr(desk, key) or (value is None and key not in NULLABLE_FIELDS):
                continue
            setattr(desk, key, value.value if isinstance(value, DeskStatus) else value)
        with storage_errors("update desk"):
            await self._session.flush()
        return desk

    async def delete(self, desk_number: int) -> bool:
        desk = await self.get_by_number(desk_number)
        if desk is None:
            return False
        with storage_errors("delete desk"):
            await self._session.delete(desk)
            await self._session.flush()
        return True

    async def count(self) -> int:
        with storage_errors("count desks"):
            result = await self._session.execute(select(func.count(DeskAssignment.id)))
            return result.scalar() or 0
