"""
Salary (payslip) model: one row per employee per pay month.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from ems.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Salary(Base):
    __tablename__ = "salaries"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # "January" .. "December"
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    basic_salary: float = Column(Float, nullable=False)  # type: ignore[assignment]
    allowances: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    deductions: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    bonus: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    net_salary: float = Column(Float, nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="Pending")  # type: ignore[assignment]
    # Pending | Paid | Cancelled
    paid_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
