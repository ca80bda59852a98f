"""
Auth error taxonomy and global exception handlers.

The auth subsystem raises the ``AuthError`` family internally so logs keep
the real reason; the HTTP layer flattens them to one generic message.
"""

from __future__ import annotations

import enum
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Auth errors ─────────────────────────────────────────────────────
class AuthErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"


class AuthError(Exception):
    kind: AuthErrorKind

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind.value)


class NotFound(AuthError):
    """No account matches the lookup."""

    kind = AuthErrorKind.NOT_FOUND


class Forbidden(AuthError):
    """Password or role predicate failed."""

    kind = AuthErrorKind.FORBIDDEN


class Conflict(AuthError):
    """Username already taken."""

    kind = AuthErrorKind.CONFLICT


class StoreUnavailable(AuthError):
    """The database call itself failed."""

    kind = AuthErrorKind.STORE_UNAVAILABLE


# ── HTTP handlers ───────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
