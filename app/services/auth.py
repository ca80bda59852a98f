"""
Auth facade — login, QR login, staff registration, logout and start-up
restore over one process-wide current identity.

Internally every failure is an ``AuthError`` with a kind; the public
``login`` / ``login_by_slug`` / ``register`` calls flatten them to a bool
so the terminal can only ever show one generic message.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import AuthError, Conflict, Forbidden, StoreUnavailable
from app.core.security import get_password_hash
from app.core.slug import slugify
from app.models.user import User
from app.repositories.accounts import AccountRepository
from app.repositories.sessions import SessionRepository
from app.schemas.identity import CurrentIdentity
from app.services.identity import IdentityResolver, LoginRole
from app.services.presence import SessionRegistrar
from app.services.storage import IdentityStore
from app.services.timer import AutoLogoutTimer, TimerState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StaffRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class AuthManager:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        store: IdentityStore,
        timer: AutoLogoutTimer,
    ):
        self._session_factory = session_factory
        self._store = store
        self._timer = timer
        self._current: CurrentIdentity | None = None

    # ── State ───────────────────────────────────────────────────────
    @property
    def current(self) -> CurrentIdentity | None:
        return self._current

    @property
    def timer_state(self) -> TimerState:
        return self._timer.state

    def _set_current(self, identity: CurrentIdentity) -> None:
        self._store.save(identity.to_stored())
        self._current = identity
        if identity.is_customer:
            self._timer.arm(self.logout)
        else:
            # staff never auto-logout; drop a countdown left by a table login
            self._timer.cancel()

    async def _guarded(self, op: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run *op* in a fresh session, mapping store failures to ``StoreUnavailable``."""
        try:
            async with self._session_factory() as db:
                return await op(db)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    # ── Raising variants ────────────────────────────────────────────
    async def authenticate(
        self,
        username: str,
        password: str | None = None,
        is_employee: bool = False,
        is_qr_login: bool = False,
    ) -> CurrentIdentity:
        role = LoginRole.for_request(password, is_employee)

        async def _op(db: AsyncSession) -> CurrentIdentity:
            identity = await IdentityResolver(AccountRepository(db)).resolve(
                username, password, role
            )
            await SessionRegistrar(SessionRepository(db)).register(
                identity.id, identity.username, via_qr=is_qr_login
            )
            return identity

        identity = await self._guarded(_op)
        self._set_current(identity)
        logger.info("Logged in %s as %s", identity.username, role.value)
        return identity

    async def authenticate_by_slug(self, slug: str, is_qr_login: bool = True) -> CurrentIdentity:
        async def _op(db: AsyncSession) -> CurrentIdentity:
            identity = await IdentityResolver(AccountRepository(db)).resolve_by_slug(slug)
            await SessionRegistrar(SessionRepository(db)).register(
                identity.id, identity.username, via_qr=is_qr_login
            )
            return identity

        identity = await self._guarded(_op)
        self._set_current(identity)
        logger.info("Logged in %s by slug", identity.username)
        return identity

    async def create_staff(
        self,
        username: str,
        phone: str,
        password: str,
        admin_username: str,
        admin_password: str,
        role: StaffRole = StaffRole.EMPLOYEE,
    ) -> CurrentIdentity:
        """Insert a staff account, gated by an admin re-authenticated inline."""

        async def _op(db: AsyncSession) -> CurrentIdentity:
            accounts = AccountRepository(db)
            await IdentityResolver(accounts).resolve(
                admin_username, admin_password, LoginRole.ADMIN
            )

            # fast rejection only; the unique constraint is the real guarantee
            if await accounts.get_by_username(username) is not None:
                raise Conflict(f"Username {username!r} already exists")

            try:
                password_hash = get_password_hash(password)
            except ValueError as exc:
                raise Forbidden("Password not accepted by the hasher") from exc

            try:
                user = await accounts.create(
                    {
                        "username": username,
                        "phone": phone,
                        "password_hash": password_hash,
                        "slug": slugify(username),
                        "is_admin": role is StaffRole.ADMIN,
                        "is_employee": role is StaffRole.EMPLOYEE,
                    }
                )
                created = CurrentIdentity.model_validate(user)
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict(f"Username {username!r} already exists") from exc
            return created

        created = await self._guarded(_op)
        logger.info("Registered %s %s (by %s)", role.value, username, admin_username)
        return created

    # ── Boolean facade ──────────────────────────────────────────────
    async def login(
        self,
        username: str,
        password: str | None = None,
        is_employee: bool = False,
        is_qr_login: bool = False,
    ) -> bool:
        try:
            await self.authenticate(username, password, is_employee, is_qr_login)
        except AuthError as exc:
            logger.info("Login failed for %r: %s (%s)", username, exc.kind.value, exc)
            return False
        except OSError as exc:
            logger.error("Could not persist identity for %r: %s", username, exc)
            return False
        return True

    async def login_by_slug(self, slug: str, is_qr_login: bool = True) -> bool:
        try:
            await self.authenticate_by_slug(slug, is_qr_login)
        except AuthError as exc:
            logger.info("Slug login failed for %r: %s (%s)", slug, exc.kind.value, exc)
            return False
        except OSError as exc:
            logger.error("Could not persist identity for slug %r: %s", slug, exc)
            return False
        return True

    async def register(
        self,
        username: str,
        phone: str,
        password: str,
        admin_username: str,
        admin_password: str,
        role: StaffRole = StaffRole.EMPLOYEE,
    ) -> bool:
        try:
            await self.create_staff(
                username, phone, password, admin_username, admin_password, role
            )
        except AuthError as exc:
            logger.info("Registration of %r failed: %s (%s)", username, exc.kind.value, exc)
            return False
        return True

    def logout(self) -> None:
        """Forget the current identity. The occupancy row is left for staff to clear."""
        self._timer.cancel()
        if self._current is not None:
            logger.info("Logged out %s", self._current.username)
        self._current = None
        self._store.clear()

    def refresh(self, user: User | None) -> CurrentIdentity | None:
        """Reconcile the current identity with its row as read now.

        A deleted account logs the terminal out; changed role flags are
        re-persisted so the guards and the stored record see them.
        """
        if self._current is None:
            return None
        if user is None or user.id != self._current.id:
            logger.info("Account %s no longer exists; logging out", self._current.username)
            self.logout()
            return None
        fresh = CurrentIdentity.model_validate(user)
        if (fresh.is_admin, fresh.is_employee) != (self._current.is_admin, self._current.is_employee):
            logger.info(
                "Roles changed for %s (admin=%s, employee=%s)",
                fresh.username,
                fresh.is_admin,
                fresh.is_employee,
            )
            self._set_current(fresh)
        return self._current

    def restore(self) -> CurrentIdentity | None:
        """Reload the persisted identity at start-up."""
        stored = self._store.load()
        if not stored:
            return None
        identity = CurrentIdentity.from_stored(stored)
        self._current = identity
        if identity.is_customer:
            self._timer.arm(self.logout)
        logger.info("Restored identity %s", identity.username or "<unnamed>")
        return identity

    def shutdown(self) -> None:
        self._timer.cancel()
