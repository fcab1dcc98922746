"""
Department CRUD.

Reads are open to every authenticated user; writes are Admin-only.
``manager`` and ``employee_count`` are maintained by the department sync
and are read-only here.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.api.v1.deps import Permission, get_db, require_permission
from ems.core.exceptions import NotFoundError, ValidationError
from ems.models.department import Department
from ems.models.user import User
from ems.schemas.common import Envelope, MessageResponse
from ems.schemas.department import (DepartmentCreate, DepartmentRead,
                                    DepartmentUpdate, ManagerSummary)

router = APIRouter(prefix="/departments", tags=["departments"])
logger = logging.getLogger(__name__)


def _with_manager_query():
    return select(Department, User).outerjoin(User, Department.manager_id == User.id)


def _to_read(department: Department, manager: User | None) -> DepartmentRead:
    data = DepartmentRead.model_validate(department)
    if manager is not None:
        data.manager = ManagerSummary.model_validate(manager)
    return data


async def _get_department(db: AsyncSession, department_id: int) -> DepartmentRead:
    result = await db.execute(_with_manager_query().where(Department.id == department_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Department not found")
    return _to_read(*row)


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    query = select(Department.id).where(func.lower(Department.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ValidationError(f"Department '{name}' already exists")


@router.get("", response_model=Envelope[list[DepartmentRead]])
async def list_departments(
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("department", "list")),
) -> dict:
    result = await db.execute(_with_manager_query().order_by(Department.name))
    return {"success": True, "data": [_to_read(d, m) for d, m in result.all()]}


@router.get("/{department_id}", response_model=Envelope[DepartmentRead])
async def get_department(
    department_id: int,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("department", "read")),
) -> dict:
    return {"success": True, "data": await _get_department(db, department_id)}


@router.post("", response_model=Envelope[DepartmentRead], status_code=201)
async def create_department(
    body: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("department", "create")),
) -> dict:
    await _ensure_name_free(db, body.name)
    department = Department(**body.model_dump())
    db.add(department)
    await db.commit()
    await db.refresh(department)
    logger.info("Created department %d (%s)", department.id, department.name)
    return {
        "success": True,
        "message": "Department created successfully",
        "data": _to_read(department, None),
    }


@router.put("/{department_id}", response_model=Envelope[DepartmentRead])
async def update_department(
    department_id: int,
    body: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("department", "update")),
) -> dict:
    department = await db.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        await _ensure_name_free(db, changes["name"], exclude_id=department_id)
    for field, value in changes.items():
        setattr(department, field, value)

    await db.commit()
    logger.info("Updated department %d", department_id)
    return {
        "success": True,
        "message": "Department updated successfully",
        "data": await _get_department(db, department_id),
    }


@router.delete("/{department_id}", response_model=MessageResponse)
async def delete_department(
    department_id: int,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("department", "delete")),
) -> MessageResponse:
    department = await db.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department not found")

    # Count live rows; employee_count may be stale
    members = (
        await db.execute(select(func.count(User.id)).where(User.department_id == department_id))
    ).scalar_one()
    if members:
        raise ValidationError(
            f"Cannot delete department '{department.name}' while it has {members} employee(s)"
        )

    await db.delete(department)
    await db.commit()
    logger.info("Deleted department %d (%s)", department_id, department.name)
    return MessageResponse(message="Department deleted successfully")
