"""Pydantic schemas for salary records."""

from __future__ import annotations

import calendar
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ems.core.enums import SalaryStatus

MONTHS = [calendar.month_name[i] for i in range(1, 13)]


def _month(v: str) -> str:
    v = v.strip().capitalize()
    if v not in MONTHS:
        raise ValueError("Month must be a full month name, e.g. 'January'")
    return v


class SalaryCreate(BaseModel):
    user_id: int
    month: str
    year: int = Field(ge=1900, le=2100)
    basic_salary: float = Field(ge=0)
    allowances: float = Field(default=0.0, ge=0)
    deductions: float = Field(default=0.0, ge=0)
    bonus: float = Field(default=0.0, ge=0)

    @field_validator("month")
    @classmethod
    def _month(cls, v: str) -> str:
        return _month(v)


class SalaryUpdate(BaseModel):
    month: str | None = None
    year: int | None = Field(default=None, ge=1900, le=2100)
    basic_salary: float | None = Field(default=None, ge=0)
    allowances: float | None = Field(default=None, ge=0)
    deductions: float | None = Field(default=None, ge=0)
    bonus: float | None = Field(default=None, ge=0)

    @field_validator("month")
    @classmethod
    def _month(cls, v: str | None) -> str | None:
        return _month(v) if v is not None else v


class SalaryStatusUpdate(BaseModel):
    status: SalaryStatus

    model_config = {"use_enum_values": True}


class SalaryRead(BaseModel):
    id: int
    user_id: int
    user_name: str | None = None
    month: str
    year: int
    basic_salary: float
    allowances: float
    deductions: float
    bonus: float
    net_salary: float
    status: str
    paid_date: datetime | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
