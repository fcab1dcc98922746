"""
User model: every employee is a login account with a role.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String

from ems.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _today() -> date:
    return datetime.now(timezone.utc).date()


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    # Always stored lower-cased, so the unique index is case-insensitive
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="Employee",
        server_default="Employee",
    )  # Admin | Employee
    department_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("departments.id"),
        nullable=False,
        index=True,
    )
    position: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    salary: float = Column(Float, nullable=False, default=0)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="Active",
        server_default="Active",
    )  # Active | Inactive
    join_date: date = Column(Date, nullable=False, default=_today)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    profile_image: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]

    # Address
    street: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    city: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    state: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    zip_code: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    country: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]

    # Emergency contact
    emergency_contact_name: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    emergency_contact_relationship: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    emergency_contact_phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    @property
    def is_active(self) -> bool:
        return self.status == "Active"

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"
