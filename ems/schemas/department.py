"""Pydantic schemas for departments."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ems.core.enums import RecordStatus


class DepartmentCreate(BaseModel):
    name: str = Field(max_length=50)
    description: str = Field(max_length=200)
    status: RecordStatus = RecordStatus.ACTIVE

    model_config = {"use_enum_values": True, "validate_default": True}

    @field_validator("name", "description")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class DepartmentUpdate(BaseModel):
    """``manager_id`` / ``employee_count`` are derived and not accepted here."""

    name: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=200)
    status: RecordStatus | None = None

    model_config = {"use_enum_values": True}

    @field_validator("name", "description")
    @classmethod
    def _not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class ManagerSummary(BaseModel):
    id: int
    name: str
    email: str
    position: str

    model_config = {"from_attributes": True}


class DepartmentRead(BaseModel):
    id: int
    name: str
    description: str
    manager_id: int | None
    manager: ManagerSummary | None = None
    employee_count: int
    status: str
    created_at: datetime | None

    model_config = {"from_attributes": True}
