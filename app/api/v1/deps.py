"""
FastAPI dependencies — database session, auth manager and role guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.session import async_session_factory
from app.repositories.accounts import AccountRepository
from app.schemas.identity import CurrentIdentity
from app.services.auth import AuthManager


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def get_auth_manager(request: Request) -> AuthManager:
    """The process-wide manager built in the app lifespan.

    The manager holds the terminal's identity, so only clients listed in
    ``TERMINAL_CLIENT_HOSTS`` may reach it.
    """
    host = request.client.host if request.client else None
    if host not in settings.TERMINAL_CLIENT_HOSTS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Terminal access only",
        )
    return request.app.state.auth_manager


async def get_current_identity(
    manager: AuthManager = Depends(get_auth_manager),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """The current identity, re-read so role changes and deletions apply at once."""
    identity = None
    if manager.current is not None:
        user = await AccountRepository(db).get_by_id(manager.current.id)
        identity = manager.refresh(user)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return identity


async def require_staff(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> CurrentIdentity:
    """Admins and employees."""
    if not identity.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff privileges required",
        )
    return identity


async def require_admin(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> CurrentIdentity:
    """Only allow admin role to proceed."""
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return identity
