"""
Account management for the back office.

- GET /users/tables is public (the table picker on the login screen).
- Other reads require staff; writes require admin.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin, require_staff
from app.core.config import settings
from app.core.security import get_password_hash
from app.core.slug import slugify
from app.models.user import User
from app.repositories.accounts import AccountRepository
from app.repositories.sessions import SessionRepository
from app.schemas.identity import CurrentIdentity
from app.schemas.user import DeleteResponse, TableRead, UserCreate, UserLink, UserRead

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


async def _get_or_404(accounts: AccountRepository, user_id: str) -> User:
    user = await accounts.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/tables", response_model=list[TableRead])
async def list_tables(db: AsyncSession = Depends(get_db)) -> list[User]:
    """Customer accounts, ordered by username."""
    return await AccountRepository(db).list_customers()


@router.get("", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _staff: CurrentIdentity = Depends(require_staff),
) -> list[User]:
    return await AccountRepository(db).list_all()


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: CurrentIdentity = Depends(require_admin),
) -> User:
    """Create an account of any role. Customers get a default phone."""
    accounts = AccountRepository(db)
    if await accounts.get_by_username(body.username) is not None:
        raise HTTPException(status_code=400, detail="Username already registered")

    try:
        user = await accounts.create(
            {
                "username": body.username,
                "phone": (body.phone or "").strip() or settings.DEFAULT_CUSTOMER_PHONE,
                "password_hash": get_password_hash(body.password) if body.password else None,
                "slug": slugify(body.username),
                "is_admin": body.is_admin,
                "is_employee": body.is_employee,
            }
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Username already registered")
    await db.refresh(user)
    logger.info("User %s created by %s", user.username, admin.username)
    return user


@router.post("/{user_id}/toggle-admin", response_model=UserRead)
async def toggle_admin(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentIdentity = Depends(require_admin),
) -> User:
    """Grant or revoke admin. Always clears the employee flag."""
    accounts = AccountRepository(db)
    user = await _get_or_404(accounts, user_id)
    await accounts.set_roles(user, is_admin=not user.is_admin, is_employee=False)
    await db.commit()
    await db.refresh(user)
    logger.info("Toggled admin for %s -> %s", user.username, user.is_admin)
    return user


@router.post("/{user_id}/toggle-employee", response_model=UserRead)
async def toggle_employee(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentIdentity = Depends(require_admin),
) -> User:
    """Grant or revoke employee. Always clears the admin flag."""
    accounts = AccountRepository(db)
    user = await _get_or_404(accounts, user_id)
    await accounts.set_roles(user, is_admin=False, is_employee=not user.is_employee)
    await db.commit()
    await db.refresh(user)
    logger.info("Toggled employee for %s -> %s", user.username, user.is_employee)
    return user


@router.get("/{user_id}/link", response_model=UserLink)
async def user_link(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _staff: CurrentIdentity = Depends(require_staff),
) -> UserLink:
    """Deep link printed in the table's QR code."""
    user = await _get_or_404(AccountRepository(db), user_id)
    return UserLink(
        username=user.username,
        slug=user.slug,
        url=f"{settings.PUBLIC_BASE_URL}/{user.slug}",
    )


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: CurrentIdentity = Depends(require_admin),
) -> DeleteResponse:
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete the logged-in account")
    accounts = AccountRepository(db)
    await SessionRepository(db).delete_for_user(user_id)
    if not await accounts.delete(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    await db.commit()
    logger.info("User %s deleted by %s", user_id, admin.username)
    return DeleteResponse(success=True, message="User deleted")
