"""
Shared test fixtures for the Employee Management System test suite.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool)
wired into the app through the ``get_db`` dependency override.
"""

import os
from datetime import date
from typing import AsyncGenerator

import pytest

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
# CORS fix (JSON format)
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEPARTMENTS"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ems.api.v1.deps import get_db
from ems.core.security import create_access_token, get_password_hash
from ems.db.base import Base
from ems.main import app
from ems.models.department import Department
from ems.models.user import User

PASSWORD = "secret123"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema per test; the app's ``get_db`` is pointed at it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Data helpers ────────────────────────────────────────────────────
async def make_department(db: AsyncSession, name: str = "Engineering") -> Department:
    department = Department(name=name, description=f"{name} department")
    db.add(department)
    await db.commit()
    await db.refresh(department)
    return department


async def make_user(
    db: AsyncSession,
    department_id: int,
    email: str,
    *,
    name: str = "Test User",
    role: str = "Employee",
    position: str = "Developer",
    status: str = "Active",
    join_date: date | None = None,
) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        role=role,
        department_id=department_id,
        position=position,
        salary=50000.0,
        phone="+1 555 0100",
        status=status,
    )
    if join_date is not None:
        user.join_date = join_date
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# ── Actors ──────────────────────────────────────────────────────────
@pytest.fixture
async def department(db_session: AsyncSession) -> Department:
    return await make_department(db_session)


@pytest.fixture
async def admin(db_session: AsyncSession, department: Department) -> User:
    return await make_user(
        db_session, department.id, "admin@example.com", name="Ada Admin", role="Admin", position="HR Lead"
    )


@pytest.fixture
async def employee(db_session: AsyncSession, department: Department) -> User:
    return await make_user(db_session, department.id, "emp@example.com", name="Eve Employee")


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture
def employee_headers(employee: User) -> dict[str, str]:
    return auth_headers(employee)


@pytest.fixture
def create_department(db_session: AsyncSession):
    async def _create(name: str) -> Department:
        return await make_department(db_session, name)

    return _create


@pytest.fixture
def create_user(db_session: AsyncSession):
    async def _create(department_id: int, email: str, **fields) -> User:
        return await make_user(db_session, department_id, email, **fields)

    return _create


@pytest.fixture
def headers_for():
    return auth_headers
