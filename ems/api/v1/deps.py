"""
FastAPI dependencies: database session, authentication and the
access-control gate.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ems.core.config import settings
from ems.core.exceptions import AuthenticationError
from ems.core.security import decode_access_token
from ems.db.session import async_session_factory
from ems.models.user import User
from ems.services.access import Scope, authorize, owner_filter

# auto_error=False so we can fall back to the cookie if the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),  # Read from HttpOnly Cookie
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode JWT from Header OR Cookie, look up user."""

    # Priority: Header > Cookie
    final_token = token
    if not final_token and access_token:
        # auth.py sets the cookie as "Bearer <token>"
        final_token = access_token.removeprefix("Bearer ").strip()

    if not final_token:
        raise AuthenticationError("Not authorized, no token")

    payload = decode_access_token(final_token)
    if payload is None:
        raise AuthenticationError("Not authorized, token failed")

    user_id: str | None = payload.get("sub")
    if user_id is None or not user_id.isdigit():
        raise AuthenticationError("Not authorized, token failed")

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError("User not found")
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject inactive accounts."""
    if not current_user.is_active:
        raise AuthenticationError("Account is inactive")
    return current_user


# ── Access-control gate ─────────────────────────────────────────────
@dataclass(frozen=True)
class Permission:
    """The authenticated caller plus the scope the policy granted them."""

    user: User
    scope: Scope
    resource: str
    action: str

    @property
    def owner_id(self) -> int | None:
        """Restrict list queries to this user id (``None`` = everything)."""
        return owner_filter(self.user, self.scope)

    def check_owner(self, owner_id: int) -> None:
        authorize(self.user, self.resource, self.action, owner_id=owner_id)


def require_permission(resource: str, action: str):
    """Dependency factory: authenticate, then consult the policy table."""

    async def _guard(current_user: User = Depends(get_current_active_user)) -> Permission:
        scope = authorize(current_user, resource, action)
        return Permission(user=current_user, scope=scope, resource=resource, action=action)

    return _guard
