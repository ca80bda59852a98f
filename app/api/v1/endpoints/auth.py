"""
Auth endpoints — table, staff and QR login, staff registration, logout.

Every failure is reported with the same generic message; the reason is
only in the logs.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.v1.deps import get_auth_manager, get_current_identity
from app.core.config import settings
from app.schemas.identity import (
    AuthResponse,
    CurrentIdentity,
    LoginRequest,
    QrLoginRequest,
    RegisterRequest,
    SlugLoginRequest,
)
from app.services.auth import AuthManager, StaffRole
from app.services.qr import parse_qr_payload

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid credentials"
_USER_NOT_FOUND = "User not found"
_QR_FAILED = "Could not log in with this QR code"


def _login_failed(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _logged_in(manager: AuthManager) -> AuthResponse:
    return AuthResponse(success=True, message="Logged in", user=manager.current)


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    manager: AuthManager = Depends(get_auth_manager),
) -> AuthResponse:
    """Table login without password; staff login with one."""
    ok = await manager.login(body.username, body.password, body.is_employee)
    if not ok:
        staff = body.is_employee or bool(body.password)
        raise _login_failed(_INVALID_CREDENTIALS if staff else _USER_NOT_FOUND)
    return _logged_in(manager)


@router.post("/login/slug", response_model=AuthResponse)
@limiter.limit("20/minute")
async def login_by_slug(
    request: Request,
    response: Response,
    body: SlugLoginRequest,
    manager: AuthManager = Depends(get_auth_manager),
) -> AuthResponse:
    """Deep-link login for a customer table."""
    if not await manager.login_by_slug(body.slug):
        raise _login_failed(_USER_NOT_FOUND)
    return _logged_in(manager)


@router.post("/login/qr", response_model=AuthResponse)
@limiter.limit("20/minute")
async def login_by_qr(
    request: Request,
    response: Response,
    body: QrLoginRequest,
    manager: AuthManager = Depends(get_auth_manager),
) -> AuthResponse:
    """Log in from the raw text of a scanned QR code."""
    try:
        target = parse_qr_payload(body.payload)
    except ValueError as exc:
        logger.info("Rejected QR payload: %s", exc)
        raise _login_failed(_QR_FAILED) from exc

    if target.slug is not None:
        ok = await manager.login_by_slug(target.slug, is_qr_login=True)
    else:
        ok = await manager.login(target.username or "", is_qr_login=True)
    if not ok:
        raise _login_failed(_QR_FAILED)
    return _logged_in(manager)


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit("5/minute")
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    manager: AuthManager = Depends(get_auth_manager),
) -> AuthResponse:
    """Create a staff account, authorised by an admin's own credentials."""
    ok = await manager.register(
        body.username,
        body.phone,
        body.password,
        body.admin_username,
        body.admin_password,
        role=StaffRole(body.role),
    )
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not create user",
        )
    return AuthResponse(success=True, message="User created")


@router.post("/logout", response_model=AuthResponse)
async def logout(manager: AuthManager = Depends(get_auth_manager)) -> AuthResponse:
    """End the terminal's session. The table stays occupied."""
    manager.logout()
    return AuthResponse(success=True, message="Logged out")


@router.get("/me", response_model=CurrentIdentity)
async def read_current_identity(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> CurrentIdentity:
    """Return the identity currently logged in on this terminal."""
    return identity
