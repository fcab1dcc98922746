"""
Employee CRUD + statistics.

- List / create / update / delete / stats require the Admin role.
- GET /employees/{id} is open to the employee themself.
- Every write that can move an employee between departments or change
  their position is followed by a department sync.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.api.v1.deps import Permission, get_db, require_permission
from ems.core.exceptions import NotFoundError, ValidationError
from ems.core.security import get_password_hash
from ems.models.department import Department
from ems.models.user import User
from ems.schemas.common import CountItem, Envelope, MessageResponse, Page, Pagination
from ems.schemas.user import EmployeeCreate, EmployeeRead, EmployeeStats, EmployeeUpdate
from ems.services.department_sync import sync_departments

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)

# Columns that may not be cleared by sending null
_REQUIRED_FIELDS = {"name", "email", "role", "department_id", "position", "salary", "status", "join_date"}
# Changes to these move the employee's department aggregates
_SYNC_FIELDS = {"department_id", "position"}


async def _get_employee(db: AsyncSession, employee_id: int) -> User:
    result = await db.execute(select(User).where(User.id == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def _ensure_department(db: AsyncSession, department_id: int) -> None:
    result = await db.execute(select(Department.id).where(Department.id == department_id))
    if result.scalar_one_or_none() is None:
        raise ValidationError("Invalid department selected")


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ValidationError("Employee already exists with this email")


# ── Listing & stats ─────────────────────────────────────────────────
@router.get("", response_model=Page[EmployeeRead])
async def list_employees(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=500),
    search: str | None = None,
    department_id: int | None = None,
    status: str | None = None,
    role: str | None = None,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("employee", "list")),
) -> dict:
    filters = []
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe = search.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")
        pattern = f"%{safe}%"
        filters.append(
            or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
                User.position.ilike(pattern, escape="\\"),
            )
        )
    if department_id is not None:
        filters.append(User.department_id == department_id)
    if status:
        filters.append(User.status == status)
    if role:
        filters.append(User.role == role)

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "success": True,
        "data": list(result.scalars().all()),
        "pagination": Pagination.build(page, limit, total),
    }


@router.get("/stats", response_model=Envelope[EmployeeStats])
async def employee_stats(
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("employee", "stats")),
) -> dict:
    """Head-count totals, recent hires and per-department / per-role counts."""
    status_rows = (
        await db.execute(select(User.status, func.count(User.id)).group_by(User.status))
    ).all()
    by_status = {status: count for status, count in status_rows}

    count_col = func.count(User.id)
    department_rows = (
        await db.execute(
            select(Department.name, count_col)
            .select_from(User)
            .join(Department, User.department_id == Department.id)
            .group_by(Department.name)
            .order_by(count_col.desc(), Department.name)
        )
    ).all()
    role_rows = (
        await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    ).all()

    thirty_days_ago = datetime.now(timezone.utc).date() - timedelta(days=30)
    recent_hires = (
        await db.execute(select(func.count(User.id)).where(User.join_date >= thirty_days_ago))
    ).scalar_one()

    stats = EmployeeStats(
        total_employees=sum(by_status.values()),
        active_employees=by_status.get("Active", 0),
        inactive_employees=by_status.get("Inactive", 0),
        recent_hires=recent_hires,
        department_stats=[CountItem(name=name, count=count) for name, count in department_rows],
        role_stats=[CountItem(name=role, count=count) for role, count in role_rows],
    )
    return {"success": True, "data": stats}


# ── CRUD ────────────────────────────────────────────────────────────
@router.post("", response_model=Envelope[EmployeeRead], status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("employee", "create")),
) -> dict:
    await _ensure_email_free(db, body.email)
    await _ensure_department(db, body.department_id)

    fields = body.model_dump(exclude={"password"}, exclude_none=True)
    employee = User(**fields, hashed_password=get_password_hash(body.password))
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    logger.info("Created employee %d (%s)", employee.id, employee.email)

    data = EmployeeRead.model_validate(employee)
    await sync_departments(db, [employee.department_id])
    return {"success": True, "message": "Employee created successfully", "data": data}


@router.get("/{employee_id}", response_model=Envelope[EmployeeRead])
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("employee", "read")),
) -> dict:
    perm.check_owner(employee_id)
    return {"success": True, "data": await _get_employee(db, employee_id)}


@router.put("/{employee_id}", response_model=Envelope[EmployeeRead])
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("employee", "update")),
) -> dict:
    employee = await _get_employee(db, employee_id)

    changes = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field not in _REQUIRED_FIELDS
    }
    if "email" in changes and changes["email"] != employee.email:
        await _ensure_email_free(db, changes["email"], exclude_id=employee.id)
    if "department_id" in changes:
        await _ensure_department(db, changes["department_id"])

    previous_department = employee.department_id
    needs_sync = any(
        getattr(employee, field) != changes[field] for field in _SYNC_FIELDS & changes.keys()
    )
    for field, value in changes.items():
        setattr(employee, field, value)

    await db.commit()
    await db.refresh(employee)
    logger.info("Updated employee %d", employee_id)

    data = EmployeeRead.model_validate(employee)
    if needs_sync:
        await sync_departments(db, [previous_department, employee.department_id])
    return {"success": True, "message": "Employee updated successfully", "data": data}


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("employee", "delete")),
) -> MessageResponse:
    employee = await _get_employee(db, employee_id)
    if employee.id == perm.user.id:
        raise ValidationError("You cannot delete your own account")

    department_id = employee.department_id
    await db.delete(employee)
    await db.commit()
    logger.info("Deleted employee %d", employee_id)

    await sync_departments(db, [department_id])
    return MessageResponse(message="Employee deleted successfully")
