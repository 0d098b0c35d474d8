from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from watchdesk.domain.enums import DeskStatus

MAX_DESK_NUMBER = 66


class DeskCreate(BaseModel):
    desk_number: int = Field(ge=1, le=MAX_DESK_NUMBER)
    employee_name: str = Field(min_length=1, max_length=255)
    status: DeskStatus = DeskStatus.ACTIVE
    camera: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("employee_name", "notes")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("employee_name")
    @classmethod
    def require_name(cls, v: str) -> str:
        if not v:
            raise ValueError("employee_name must not be blank")
        return v


class DeskUpdate(BaseModel):
    employee_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[DeskStatus] = None
    camera: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("employee_name", "notes")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class DeskResponse(BaseModel):
    id: int
    desk_number: int
    employee_name: str
    status: str
    camera: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeskList(BaseModel):
    desks: list[DeskResponse]
    total: int
    page: int
    limit: int
    total_pages: int
