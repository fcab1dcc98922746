"""
Department model.

``employee_count`` and ``manager_id`` are denormalized from the users
table and only ever written by ``ems.services.department_sync``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from ems.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Department(Base):
    __tablename__ = "departments"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(50), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    description: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    manager_id: int | None = Column(  # type: ignore[assignment]
        Integer,
        # users.department_id points back here, so this side is added after both tables exist
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_departments_manager_id"),
        nullable=True,
    )
    employee_count: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="Active",
        server_default="Active",
    )  # Active | Inactive
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
