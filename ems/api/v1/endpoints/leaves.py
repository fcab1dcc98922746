"""
Leave requests.

Employees file and withdraw their own requests; Admins review them.
A request is reviewed exactly once: Pending → Approved or Pending → Rejected.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.api.v1.deps import Permission, get_db, require_permission
from ems.core.enums import LeaveStatus, Role
from ems.core.exceptions import NotFoundError, ValidationError
from ems.models.leave import Leave
from ems.models.user import User
from ems.schemas.common import Envelope, MessageResponse, Page, Pagination
from ems.schemas.leave import LeaveCreate, LeaveRead, LeaveStatusUpdate
from ems.services.derived import leave_total_days

router = APIRouter(prefix="/leaves", tags=["leaves"])
logger = logging.getLogger(__name__)


def _to_read(leave: Leave, user_name: str | None) -> LeaveRead:
    data = LeaveRead.model_validate(leave)
    data.user_name = user_name
    return data


async def _get_leave(db: AsyncSession, leave_id: int) -> Leave:
    leave = await db.get(Leave, leave_id)
    if leave is None:
        raise NotFoundError("Leave request not found")
    return leave


@router.get("", response_model=Page[LeaveRead])
async def list_leaves(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=500),
    status: LeaveStatus | None = None,
    user_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("leave", "list")),
) -> dict:
    filters = []
    if perm.owner_id is not None:
        filters.append(Leave.user_id == perm.owner_id)
    elif user_id is not None:
        filters.append(Leave.user_id == user_id)
    if status:
        filters.append(Leave.status == status.value)

    total = (await db.execute(select(func.count(Leave.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(Leave, User.name)
        .join(User, Leave.user_id == User.id)
        .where(*filters)
        .order_by(Leave.created_at.desc(), Leave.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "success": True,
        "data": [_to_read(leave, name) for leave, name in result.all()],
        "pagination": Pagination.build(page, limit, total),
    }


@router.post("", response_model=Envelope[LeaveRead], status_code=201)
async def apply_leave(
    body: LeaveCreate,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("leave", "create")),
) -> dict:
    leave = Leave(
        user_id=perm.user.id,
        leave_type=body.leave_type,
        from_date=body.from_date,
        to_date=body.to_date,
        total_days=leave_total_days(body.from_date, body.to_date),
        reason=body.reason,
        status=LeaveStatus.PENDING.value,
    )
    db.add(leave)
    await db.commit()
    await db.refresh(leave)
    logger.info("User %d applied for %d day(s) of %s", perm.user.id, leave.total_days, leave.leave_type)
    return {
        "success": True,
        "message": "Leave application submitted successfully",
        "data": _to_read(leave, perm.user.name),
    }


@router.patch("/{leave_id}/status", response_model=Envelope[LeaveRead])
async def review_leave(
    leave_id: int,
    body: LeaveStatusUpdate,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("leave", "review")),
) -> dict:
    leave = await _get_leave(db, leave_id)

    if leave.status != LeaveStatus.PENDING:
        raise ValidationError(f"Leave request has already been {leave.status.lower()}")
    if body.status == LeaveStatus.PENDING:
        raise ValidationError("Status must be Approved or Rejected")

    rejection_reason = (body.rejection_reason or "").strip()
    if body.status == LeaveStatus.REJECTED and not rejection_reason:
        raise ValidationError("Rejection reason is required")

    leave.status = body.status
    leave.approved_by_id = perm.user.id
    leave.approved_date = datetime.now(timezone.utc)
    leave.rejection_reason = rejection_reason if body.status == LeaveStatus.REJECTED else None

    await db.commit()
    await db.refresh(leave)
    applicant = await db.get(User, leave.user_id)
    logger.info("Leave %d %s by user %d", leave_id, leave.status, perm.user.id)
    return {
        "success": True,
        "message": f"Leave {leave.status.lower()} successfully",
        "data": _to_read(leave, applicant.name if applicant else None),
    }


@router.delete("/{leave_id}", response_model=MessageResponse)
async def delete_leave(
    leave_id: int,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("leave", "delete")),
) -> MessageResponse:
    leave = await _get_leave(db, leave_id)
    perm.check_owner(leave.user_id)
    if perm.user.role != Role.ADMIN and leave.status != LeaveStatus.PENDING:
        raise ValidationError("Only pending leave requests can be deleted")

    await db.delete(leave)
    await db.commit()
    logger.info("Deleted leave %d", leave_id)
    return MessageResponse(message="Leave request deleted successfully")
