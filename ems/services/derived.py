"""
Derived-field calculators.

Pure functions called explicitly by the write paths for attendance, leave
and salary records.  Nothing here touches the database.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

from ems.core.enums import AttendanceStatus, SalaryStatus
from ems.core.exceptions import ValidationError

_CLOCK_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


# ── Clock times ─────────────────────────────────────────────────────
def parse_clock(value: str) -> int:
    """Return minutes since midnight for a ``HH:MM`` (24h) string."""
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Invalid time format (HH:MM): {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def normalize_clock(value: str) -> str:
    """Canonical zero-padded ``HH:MM`` form, e.g. ``"9:05"`` -> ``"09:05"``."""
    minutes = parse_clock(value)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# ── Attendance ──────────────────────────────────────────────────────
def working_hours(check_in: str, check_out: str) -> float:
    """Hours between two same-day clock times, never negative."""
    diff = parse_clock(check_out) - parse_clock(check_in)
    return max(0.0, diff / 60)


def overtime(hours: float, standard_hours: float = 8.0) -> float:
    return max(0.0, hours - standard_hours)


def check_in_status(
    check_in: str,
    work_start: str = "09:00",
    grace_minutes: int = 30,
) -> AttendanceStatus:
    """Present when on time or late by at most ``grace_minutes``, else Late."""
    late_by = parse_clock(check_in) - parse_clock(work_start)
    if late_by > grace_minutes:
        return AttendanceStatus.LATE
    return AttendanceStatus.PRESENT


def attendance_hours(
    check_in: str | None,
    check_out: str | None,
    standard_hours: float = 8.0,
) -> tuple[float, float] | None:
    """``(working_hours, overtime)`` once both times are known, else ``None``."""
    if not check_in or not check_out:
        return None
    hours = working_hours(check_in, check_out)
    return round(hours, 2), round(overtime(hours, standard_hours), 2)


# ── Leave ───────────────────────────────────────────────────────────
def leave_total_days(from_date: date, to_date: date) -> int:
    """Inclusive number of calendar days covered by a leave request."""
    if from_date > to_date:
        raise ValidationError("From date cannot be later than to date")
    return (to_date - from_date).days + 1


# ── Salary ──────────────────────────────────────────────────────────
def net_salary(
    basic_salary: float,
    allowances: float = 0.0,
    deductions: float = 0.0,
    bonus: float = 0.0,
) -> float:
    return basic_salary + allowances + bonus - deductions


def paid_date_for(status: str, now: datetime | None = None) -> datetime | None:
    """``paid_date`` is stamped only while a salary is Paid."""
    if status == SalaryStatus.PAID:
        return now or datetime.now(timezone.utc)
    return None
