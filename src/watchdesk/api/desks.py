import math
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from watchdesk.api.deps import get_db
from watchdesk.api.schemas.desks import MAX_DESK_NUMBER, DeskCreate, DeskList, DeskResponse, DeskUpdate
from watchdesk.db.errors import storage_errors
from watchdesk.db.repos.desk_repo import SORTABLE_FIELDS, DeskRepo
from watchdesk.domain.enums import DeskStatus
from watchdesk.exceptions import ConflictError, NotFoundError, ValidationError

router = APIRouter(prefix="/api/desks", tags=["desks"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
DeskNumber = Annotated[int, Path(ge=1, le=MAX_DESK_NUMBER)]


def _parse_sort(sort_by: str) -> tuple[str, bool]:
    """``field:asc`` / ``field:desc``; direction defaults to ascending."""
    field, _, direction = sort_by.partition(":")
    if field not in SORTABLE_FIELDS or direction not in ("", "asc", "desc"):
        raise ValidationError("Invalid sortBy", [f"sortBy must be one of {', '.join(SORTABLE_FIELDS)} with :asc or :desc"])
    return field, direction == "desc"


@router.get("", response_model=DeskList)
async def list_desks(
    db: DbDep,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=100),
    sortBy: str = Query("desk_number:asc"),
    desk_status: Optional[DeskStatus] = Query(None, alias="status"),
) -> DeskList:
    field, descending = _parse_sort(sortBy)
    desks, total = await DeskRepo(db).list_page(
        page=page, limit=limit, sort_field=field, descending=descending, status=desk_status
    )
    return DeskList(
        desks=[DeskResponse.model_validate(d) for d in desks],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


@router.post("", response_model=DeskResponse, status_code=status.HTTP_201_CREATED)
async def create_desk(body: DeskCreate, db: DbDep) -> DeskResponse:
    repo = DeskRepo(db)
    if await repo.get_by_number(body.desk_number) is not None:
        raise ConflictError(f"Desk {body.desk_number} is already assigned")

    desk = await repo.create(
        desk_number=body.desk_number,
        employee_name=body.employee_name,
        status=body.status,
        camera=body.camera,
        notes=body.notes,
    )
    with storage_errors("commit desk"):
        await db.commit()
        await db.refresh(desk)
    return DeskResponse.model_validate(desk)


@router.get("/employee/{employee_name}", response_model=DeskResponse)
async def get_employee_desk(employee_name: str, db: DbDep) -> DeskResponse:
    desk = await DeskRepo(db).get_by_employee(employee_name)
    if desk is None:
        raise NotFoundError("No desk assigned to this employee")
    return DeskResponse.model_validate(desk)


@router.get("/{desk_number}", response_model=DeskResponse)
async def get_desk(desk_number: DeskNumber, db: DbDep) -> DeskResponse:
    desk = await DeskRepo(db).get_by_number(desk_number)
    if desk is None:
        raise NotFoundError("Desk not found")
    return DeskResponse.model_validate(desk)


@router.patch("/{desk_number}", response_model=DeskResponse)
async def update_desk(desk_number: DeskNumber, body: DeskUpdate, db: DbDep) -> DeskResponse:
    if not body.model_fields_set:
        raise ValidationError("Nothing to update", ["provide at least one field"])

    desk = await DeskRepo(db).update(desk_number, **body.model_dump(exclude_unset=True))
    if desk is None:
        raise NotFoundError("Desk not found")
    with storage_errors("commit desk"):
        await db.commit()
        await db.refresh(desk)
    return DeskResponse.model_validate(desk)


@router.delete("/{desk_number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_desk(desk_number: DeskNumber, db: DbDep) -> None:
    if not await DeskRepo(db).delete(desk_number):
        raise NotFoundError("Desk not found")
    with storage_errors("commit desk"):
        await db.commit()
