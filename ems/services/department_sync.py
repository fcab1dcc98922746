"""
Department sync: keeps ``Department.employee_count`` and
``Department.manager_id`` in line with the users table.

Runs as a post-commit hook after every employee create / update / delete.
It is best-effort: a failure here is logged and rolled back, but the
employee write that triggered it has already been committed and stays.
The next successful sync for the same department repairs any drift.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ems.core.enums import MANAGER_POSITION
from ems.models.department import Department
from ems.models.user import User

logger = logging.getLogger(__name__)


async def count_employees(db: AsyncSession, department_id: int) -> int:
    result = await db.execute(
        select(func.count(User.id)).where(User.department_id == department_id)
    )
    return int(result.scalar_one())


async def pick_manager(db: AsyncSession, department_id: int) -> int | None:
    """Earliest-joined "Manager" of the department; lowest id breaks ties."""
    result = await db.execute(
        select(User.id)
        .where(User.department_id == department_id, User.position == MANAGER_POSITION)
        .order_by(User.join_date.asc(), User.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def sync_department(db: AsyncSession, department_id: int) -> None:
    """Recount employees and re-pick the manager, then persist both in one update."""
    employee_count = await count_employees(db, department_id)
    manager_id = await pick_manager(db, department_id)
    await db.execute(
        update(Department)
        .where(Department.id == department_id)
        .values(employee_count=employee_count, manager_id=manager_id)
    )
    logger.debug(
        "Department %d synced: employee_count=%d manager_id=%s",
        department_id,
        employee_count,
        manager_id,
    )


async def sync_departments(db: AsyncSession, department_ids: Iterable[int | None]) -> bool:
    """Sync every distinct department id given; ``None`` entries are skipped.

    Returns ``False`` if the sync failed.  Never raises for store errors.
    """
    ids = sorted({d for d in department_ids if d is not None})
    if not ids:
        return True
    try:
        for department_id in ids:
            await sync_department(db, department_id)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Department sync failed for %s: %s", ids, exc)
        return False
    return True


async def resync_all_departments(db: AsyncSession) -> int:
    """Recompute every department.  Returns how many were synced."""
    result = await db.execute(select(Department.id))
    ids = list(result.scalars().all())
    if ids and await sync_departments(db, ids):
        logger.info("Resynced %d departments", len(ids))
    return len(ids)
