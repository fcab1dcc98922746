"""
First-run data: the default department list and the bootstrap Admin.

Both seeders are idempotent and safe to call on every startup.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.core.config import settings
from ems.core.enums import Role
from ems.core.security import get_password_hash
from ems.models.department import Department
from ems.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS: list[tuple[str, str]] = [
    ("Human Resources", "Manages employee relations, recruitment, and HR policies"),
    ("Finance", "Handles financial planning, accounting, and budget management"),
    ("Sales", "Responsible for revenue generation and client acquisition"),
    ("Marketing", "Manages brand promotion, advertising, and market research"),
    ("Engineering", "Develops and maintains software products and technical solutions"),
    ("Product Management", "Oversees product strategy, development, and lifecycle management"),
    ("IT & Infrastructure", "Maintains IT systems, networks, and technical infrastructure"),
    ("Operations", "Manages day-to-day business operations and process optimization"),
    ("Admin / Office Management", "Handles administrative tasks and office management"),
    ("Research & Development (R&D)", "Conducts research and develops new technologies and products"),
]


async def seed_departments(db: AsyncSession) -> int:
    """Insert any default department that is missing.  Returns how many were added."""
    existing = set((await db.execute(select(Department.name))).scalars().all())
    missing = [(name, desc) for name, desc in DEFAULT_DEPARTMENTS if name not in existing]
    for name, description in missing:
        db.add(Department(name=name, description=description))
    if missing:
        await db.commit()
        logger.info("Seeded %d default departments", len(missing))
    return len(missing)


async def seed_admin(db: AsyncSession) -> User | None:
    """Create the bootstrap Admin unless that email is already registered."""
    # Emails are stored lower-cased
    email = settings.FIRST_ADMIN_EMAIL.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        return None

    # Every user needs a department
    department_id = (await db.execute(select(func.min(Department.id)))).scalar_one()
    if department_id is None:
        name, description = DEFAULT_DEPARTMENTS[0]
        department = Department(name=name, description=description)
        db.add(department)
        await db.flush()
        department_id = department.id

    admin = User(
        name="System Administrator",
        email=email,
        hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        department_id=department_id,
        position="Administrator",
        salary=0.0,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info("Default admin created: %s (password: <redacted>)", email)
    return admin
