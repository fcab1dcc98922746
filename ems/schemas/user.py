"""Pydantic schemas for employee (user) CRUD and self-service profile."""

from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from ems.core.enums import RecordStatus, Role
from ems.schemas.common import CountItem

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Please enter a valid email")
    return v


def _check_phone(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not _PHONE_RE.match(v):
        raise ValueError("Please enter a valid phone number")
    return v


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    if len(v) > 50:
        raise ValueError("Name cannot exceed 50 characters")
    return v


class ContactFields(BaseModel):
    """Fields an employee may edit on their own profile."""

    phone: str | None = None
    profile_image: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_relationship: str | None = None
    emergency_contact_phone: str | None = None

    @field_validator("phone", "emergency_contact_phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return _check_phone(v)


class EmployeeCreate(ContactFields):
    name: str
    email: str
    password: str = Field(min_length=6)
    role: Role = Role.EMPLOYEE
    department_id: int
    position: str = Field(min_length=1, max_length=100)
    salary: float = Field(ge=0)
    phone: str
    status: RecordStatus = RecordStatus.ACTIVE
    join_date: date | None = None

    model_config = {"use_enum_values": True, "validate_default": True}

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("position")
    @classmethod
    def _position(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Position is required")
        return v


class EmployeeUpdate(ContactFields):
    """Admin update.  Passwords are never changed through this schema."""

    name: str | None = None
    email: str | None = None
    role: Role | None = None
    department_id: int | None = None
    position: str | None = Field(default=None, min_length=1, max_length=100)
    salary: float | None = Field(default=None, ge=0)
    status: RecordStatus | None = None
    join_date: date | None = None

    model_config = {"use_enum_values": True}

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return _check_name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return _normalise_email(v) if v is not None else v

    @field_validator("position")
    @classmethod
    def _position(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ProfileUpdate(ContactFields):
    pass


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class EmployeeRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    department_id: int
    position: str
    salary: float
    status: str
    join_date: date | None
    phone: str | None
    profile_image: str | None
    street: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str | None
    emergency_contact_name: str | None
    emergency_contact_relationship: str | None
    emergency_contact_phone: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class EmployeeStats(BaseModel):
    total_employees: int
    active_employees: int
    inactive_employees: int
    recent_hires: int
    department_stats: list[CountItem]
    role_stats: list[CountItem]
