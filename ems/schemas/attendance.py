"""Pydantic schemas for attendance marking, listing and stats."""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ems.core.enums import AttendanceStatus
from ems.core.exceptions import ValidationError
from ems.services.derived import normalize_clock


def _clock(v: str | None) -> str | None:
    if v is None or v == "":
        return None
    try:
        return normalize_clock(v)
    except ValidationError as exc:
        raise ValueError(exc.message) from exc


class AttendanceMark(BaseModel):
    """Check-in creates today's record; check-out completes it."""

    check_in: str | None = None
    check_out: str | None = None
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("check_in", "check_out")
    @classmethod
    def _time(cls, v: str | None) -> str | None:
        return _clock(v)


class AttendanceUpdate(BaseModel):
    check_in: str | None = None
    check_out: str | None = None
    status: AttendanceStatus | None = None
    notes: str | None = Field(default=None, max_length=500)

    model_config = {"use_enum_values": True}

    @field_validator("check_in", "check_out")
    @classmethod
    def _time(cls, v: str | None) -> str | None:
        return _clock(v)


class AttendanceRead(BaseModel):
    id: int
    user_id: int
    user_name: str | None = None  # joined from users table
    date: date_type
    check_in: str
    check_out: str | None
    status: str
    working_hours: float
    overtime: float
    notes: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class AttendanceStats(BaseModel):
    today_stats: dict[str, int]
    monthly_stats: dict[str, int]
    avg_working_hours: float
    late_arrivals: int
    total_employees: int
    present_today: int
    attendance_rate: float
