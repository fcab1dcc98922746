"""
Attendance model: one row per employee per calendar day.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Column, Date, DateTime, Float, ForeignKey, Integer,
                        String, UniqueConstraint)

from ems.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    check_in: str = Column(String(5), nullable=False)  # type: ignore[assignment]  # HH:MM
    check_out: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    status: str = Column(String(20), nullable=False, default="Present")  # type: ignore[assignment]
    # Present | Late | Absent | Half Day
    working_hours: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    overtime: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
