"""Pydantic schemas for leave requests."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from ems.core.enums import LeaveStatus, LeaveType


class LeaveCreate(BaseModel):
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: str = Field(max_length=500)

    model_config = {"use_enum_values": True}

    @field_validator("reason")
    @classmethod
    def _reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason is required")
        return v


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus
    rejection_reason: str | None = Field(default=None, max_length=200)

    model_config = {"use_enum_values": True}


class LeaveRead(BaseModel):
    id: int
    user_id: int
    user_name: str | None = None
    leave_type: str
    from_date: date
    to_date: date
    total_days: int
    reason: str
    status: str
    approved_by_id: int | None
    approved_date: datetime | None
    rejection_reason: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
