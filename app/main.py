"""
Mesa Auth — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/`, `repositories/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from app.api.v1.api import api_router
from app.api.v1.endpoints.auth import limiter
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.security import get_password_hash
from app.core.slug import slugify
from app.db.base import Base
from app.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from app.models.active_session import ActiveSession  # noqa: F401
from app.models.user import User
from app.services.auth import AuthManager
from app.services.storage import IdentityStore
from app.services.timer import AutoLogoutTimer

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def build_auth_manager() -> AuthManager:
    return AuthManager(
        async_session_factory,
        IdentityStore(settings.IDENTITY_STORE_PATH, settings.IDENTITY_STORAGE_KEY),
        AutoLogoutTimer(settings.AUTO_LOGOUT_SECONDS),
    )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed default admin user on first run
    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(User.username == settings.FIRST_ADMIN_USERNAME)
        )
        if result.scalar_one_or_none() is None:
            admin = User(
                username=settings.FIRST_ADMIN_USERNAME,
                phone=settings.FIRST_ADMIN_PHONE,
                password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                slug=slugify(settings.FIRST_ADMIN_USERNAME),
                is_admin=True,
            )
            session.add(admin)
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_USERNAME,
            )

    manager = build_auth_manager()
    manager.restore()
    application.state.auth_manager = manager

    logger.info("🚀 Mesa Auth v%s started", settings.VERSION)
    yield
    manager.shutdown()
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title="Mesa Auth",
        description="Table, staff and QR login for restaurant terminals",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
