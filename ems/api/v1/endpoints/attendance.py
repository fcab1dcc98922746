"""
Attendance endpoints: daily check-in / check-out, listing and stats.

One record per employee per day.  The first POST of the day checks in
and fixes the status (Present / Late); the second POST checks out and
fills in working hours and overtime.  Anything after that is rejected.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ems.api.v1.deps import Permission, get_db, require_permission
from ems.core.config import settings
from ems.core.enums import AttendanceStatus, RecordStatus
from ems.core.exceptions import DuplicateError, NotFoundError, ValidationError
from ems.models.attendance import Attendance
from ems.models.user import User
from ems.schemas.attendance import (AttendanceMark, AttendanceRead,
                                    AttendanceStats, AttendanceUpdate)
from ems.schemas.common import Envelope, MessageResponse, Page, Pagination
from ems.services.derived import attendance_hours, check_in_status

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)

ALREADY_MARKED = "Attendance already marked for today"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _apply_hours(attendance: Attendance) -> None:
    """Refresh working hours / overtime from the record's own clock times."""
    hours = attendance_hours(
        attendance.check_in, attendance.check_out, settings.STANDARD_WORK_HOURS
    )
    attendance.working_hours, attendance.overtime = hours or (0.0, 0.0)


def _to_read(attendance: Attendance, user_name: str | None) -> AttendanceRead:
    data = AttendanceRead.model_validate(attendance)
    data.user_name = user_name
    return data


def _with_user_query():
    return select(Attendance, User.name).join(User, Attendance.user_id == User.id)


# ── Check-in / check-out ────────────────────────────────────────────
@router.post("", response_model=Envelope[AttendanceRead])
async def mark_attendance(
    body: AttendanceMark,
    response: Response,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("attendance", "mark")),
) -> dict:
    user = perm.user
    today = _today()

    result = await db.execute(
        select(Attendance).where(Attendance.user_id == user.id, Attendance.date == today)
    )
    attendance = result.scalar_one_or_none()

    if attendance is not None:
        if not body.check_out or attendance.check_out:
            raise ValidationError(ALREADY_MARKED)
        attendance.check_out = body.check_out
        attendance.notes = body.notes or attendance.notes
        _apply_hours(attendance)
        await db.commit()
        await db.refresh(attendance)
        logger.info("Check-out %s for user %d", attendance.check_out, user.id)
        return {
            "success": True,
            "message": "Check-out recorded successfully",
            "data": _to_read(attendance, user.name),
        }

    if not body.check_in:
        raise ValidationError("Check-in time is required")

    attendance = Attendance(
        user_id=user.id,
        date=today,
        check_in=body.check_in,
        check_out=body.check_out,
        status=check_in_status(
            body.check_in, settings.WORK_START, settings.LATE_GRACE_MINUTES
        ).value,
        notes=body.notes,
    )
    _apply_hours(attendance)
    db.add(attendance)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request checked in first
        await db.rollback()
        raise DuplicateError(ALREADY_MARKED)
    await db.refresh(attendance)
    logger.info("Check-in %s (%s) for user %d", attendance.check_in, attendance.status, user.id)

    response.status_code = 201
    return {
        "success": True,
        "message": "Attendance marked successfully",
        "data": _to_read(attendance, user.name),
    }


# ── Listing ─────────────────────────────────────────────────────────
@router.get("", response_model=Page[AttendanceRead])
async def list_attendance(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=500),
    from_date: date | None = None,
    to_date: date | None = None,
    status: AttendanceStatus | None = None,
    user_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("attendance", "list")),
) -> dict:
    filters = []
    owner_id = perm.owner_id
    if owner_id is not None:
        filters.append(Attendance.user_id == owner_id)
    elif user_id is not None:
        filters.append(Attendance.user_id == user_id)
    if from_date:
        filters.append(Attendance.date >= from_date)
    if to_date:
        filters.append(Attendance.date <= to_date)
    if status:
        filters.append(Attendance.status == status.value)

    total = (await db.execute(select(func.count(Attendance.id)).where(*filters))).scalar_one()
    result = await db.execute(
        _with_user_query()
        .where(*filters)
        .order_by(Attendance.date.desc(), Attendance.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "success": True,
        "data": [_to_read(att, name) for att, name in result.all()],
        "pagination": Pagination.build(page, limit, total),
    }


@router.get("/today", response_model=Envelope[list[AttendanceRead]])
async def attendance_today(
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("attendance", "today")),
) -> dict:
    query = _with_user_query().where(Attendance.date == _today())
    if perm.owner_id is not None:
        query = query.where(Attendance.user_id == perm.owner_id)
    result = await db.execute(query.order_by(Attendance.check_in.asc()))
    return {"success": True, "data": [_to_read(att, name) for att, name in result.all()]}


@router.get("/stats", response_model=Envelope[AttendanceStats])
async def attendance_stats(
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("attendance", "stats")),
) -> dict:
    """Today's and this month's status breakdown plus headline rates."""
    today = _today()
    start_of_month = today.replace(day=1)

    async def _status_counts(*where) -> dict[str, int]:
        rows = await db.execute(
            select(Attendance.status, func.count(Attendance.id))
            .where(*where)
            .group_by(Attendance.status)
        )
        return {status: count for status, count in rows.all()}

    today_stats = await _status_counts(Attendance.date == today)
    monthly_stats = await _status_counts(Attendance.date >= start_of_month)

    avg_hours = (
        await db.execute(
            select(func.avg(Attendance.working_hours)).where(
                Attendance.date >= start_of_month, Attendance.working_hours > 0
            )
        )
    ).scalar_one()
    total_employees = (
        await db.execute(
            select(func.count(User.id)).where(User.status == RecordStatus.ACTIVE.value)
        )
    ).scalar_one()
    present_today = sum(
        today_stats.get(s.value, 0) for s in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
    )

    stats = AttendanceStats(
        today_stats=today_stats,
        monthly_stats=monthly_stats,
        avg_working_hours=round(float(avg_hours or 0), 2),
        late_arrivals=monthly_stats.get(AttendanceStatus.LATE.value, 0),
        total_employees=total_employees,
        present_today=present_today,
        attendance_rate=round(present_today / total_employees * 100, 2) if total_employees else 0.0,
    )
    return {"success": True, "data": stats}


# ── Admin corrections ───────────────────────────────────────────────
async def _get_attendance(db: AsyncSession, attendance_id: int) -> Attendance:
    attendance = await db.get(Attendance, attendance_id)
    if attendance is None:
        raise NotFoundError("Attendance record not found")
    return attendance


@router.put("/{attendance_id}", response_model=Envelope[AttendanceRead])
async def update_attendance(
    attendance_id: int,
    body: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("attendance", "update")),
) -> dict:
    attendance = await _get_attendance(db, attendance_id)

    changes = body.model_dump(exclude_unset=True)
    if changes.get("check_in", "") is None or changes.get("status", "") is None:
        raise ValidationError("check_in and status cannot be cleared")
    for field, value in changes.items():
        setattr(attendance, field, value)
    _apply_hours(attendance)

    await db.commit()
    await db.refresh(attendance)
    user = await db.get(User, attendance.user_id)
    logger.info("Updated attendance %d", attendance_id)
    return {
        "success": True,
        "message": "Attendance updated successfully",
        "data": _to_read(attendance, user.name if user else None),
    }


@router.delete("/{attendance_id}", response_model=MessageResponse)
async def delete_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("attendance", "delete")),
) -> MessageResponse:
    attendance = await _get_attendance(db, attendance_id)
    await db.delete(attendance)
    await db.commit()
    logger.info("Deleted attendance %d", attendance_id)
    return MessageResponse(message="Attendance record deleted successfully")
