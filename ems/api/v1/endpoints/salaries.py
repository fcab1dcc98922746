"""
Salary (payslip) endpoints.

Admins create, amend and settle payslips; employees can only list their
own.  ``net_salary`` and ``paid_date`` are always derived server-side.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.api.v1.deps import Permission, get_db, require_permission
from ems.core.config import settings
from ems.core.enums import SalaryStatus
from ems.core.exceptions import NotFoundError, ValidationError
from ems.models.salary import Salary
from ems.models.user import User
from ems.schemas.common import Envelope, MessageResponse, Page, Pagination
from ems.schemas.salary import (MONTHS, SalaryCreate, SalaryRead,
                                SalaryStatusUpdate, SalaryUpdate)
from ems.services.derived import net_salary, paid_date_for

router = APIRouter(prefix="/salaries", tags=["salaries"])
logger = logging.getLogger(__name__)

_AMOUNT_FIELDS = ("basic_salary", "allowances", "deductions", "bonus")
_month_order = case({name: index for index, name in enumerate(MONTHS, start=1)}, value=Salary.month)


def _allowed_transitions(current: str) -> set[str]:
    if current == SalaryStatus.PENDING:
        return {SalaryStatus.PAID.value, SalaryStatus.CANCELLED.value}
    if current == SalaryStatus.PAID and settings.SALARY_ALLOW_PAID_CANCEL:
        return {SalaryStatus.CANCELLED.value}
    return set()


def _to_read(salary: Salary, user_name: str | None) -> SalaryRead:
    data = SalaryRead.model_validate(salary)
    data.user_name = user_name
    return data


async def _get_salary(db: AsyncSession, salary_id: int) -> Salary:
    salary = await db.get(Salary, salary_id)
    if salary is None:
        raise NotFoundError("Salary record not found")
    return salary


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("Employee not found")
    return user


@router.get("", response_model=Page[SalaryRead])
async def list_salaries(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=500),
    year: int | None = None,
    month: str | None = None,
    status: SalaryStatus | None = None,
    user_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    perm: Permission = Depends(require_permission("salary", "list")),
) -> dict:
    filters = []
    if perm.owner_id is not None:
        filters.append(Salary.user_id == perm.owner_id)
    elif user_id is not None:
        filters.append(Salary.user_id == user_id)
    if year is not None:
        filters.append(Salary.year == year)
    if month:
        filters.append(Salary.month == month.strip().capitalize())
    if status:
        filters.append(Salary.status == status.value)

    total = (await db.execute(select(func.count(Salary.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(Salary, User.name)
        .join(User, Salary.user_id == User.id)
        .where(*filters)
        .order_by(Salary.year.desc(), _month_order.desc(), Salary.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "success": True,
        "data": [_to_read(salary, name) for salary, name in result.all()],
        "pagination": Pagination.build(page, limit, total),
    }


@router.post("", response_model=Envelope[SalaryRead], status_code=201)
async def create_salary(
    body: SalaryCreate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("salary", "create")),
) -> dict:
    employee = await _get_user(db, body.user_id)

    fields = body.model_dump()
    salary = Salary(
        **fields,
        net_salary=net_salary(*(fields[f] for f in _AMOUNT_FIELDS)),
        status=SalaryStatus.PENDING.value,
    )
    db.add(salary)
    await db.commit()
    await db.refresh(salary)
    logger.info("Created salary %d for user %d (%s %d)", salary.id, salary.user_id, salary.month, salary.year)
    return {
        "success": True,
        "message": "Salary record created successfully",
        "data": _to_read(salary, employee.name),
    }


@router.put("/{salary_id}", response_model=Envelope[SalaryRead])
async def update_salary(
    salary_id: int,
    body: SalaryUpdate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("salary", "update")),
) -> dict:
    salary = await _get_salary(db, salary_id)
    if salary.status == SalaryStatus.CANCELLED:
        raise ValidationError("Cancelled salary records cannot be modified")

    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(salary, field, value)
    salary.net_salary = net_salary(*(getattr(salary, f) for f in _AMOUNT_FIELDS))

    await db.commit()
    await db.refresh(salary)
    employee = await db.get(User, salary.user_id)
    logger.info("Updated salary %d", salary_id)
    return {
        "success": True,
        "message": "Salary record updated successfully",
        "data": _to_read(salary, employee.name if employee else None),
    }


@router.patch("/{salary_id}/status", response_model=Envelope[SalaryRead])
async def update_salary_status(
    salary_id: int,
    body: SalaryStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("salary", "review")),
) -> dict:
    salary = await _get_salary(db, salary_id)

    if body.status not in _allowed_transitions(salary.status):
        raise ValidationError(f"Cannot change salary status from {salary.status} to {body.status}")

    salary.status = body.status
    salary.paid_date = paid_date_for(body.status)

    await db.commit()
    await db.refresh(salary)
    employee = await db.get(User, salary.user_id)
    logger.info("Salary %d marked %s", salary_id, salary.status)
    return {
        "success": True,
        "message": f"Salary status updated to {salary.status}",
        "data": _to_read(salary, employee.name if employee else None),
    }


@router.delete("/{salary_id}", response_model=MessageResponse)
async def delete_salary(
    salary_id: int,
    db: AsyncSession = Depends(get_db),
    _perm: Permission = Depends(require_permission("salary", "delete")),
) -> MessageResponse:
    salary = await _get_salary(db, salary_id)
    await db.delete(salary)
    await db.commit()
    logger.info("Deleted salary %d", salary_id)
    return MessageResponse(message="Salary record deleted successfully")
