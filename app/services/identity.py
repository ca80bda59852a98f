"""
Identity resolution: username or slug -> at most one account.

Each login path maps to one fixed query on ``AccountRepository``; the
role predicates are mutually exclusive.
"""

from __future__ import annotations

import enum
import logging

from app.core.exceptions import Forbidden, NotFound
from app.repositories.accounts import AccountRepository
from app.schemas.identity import CurrentIdentity
from app.services.credentials import CredentialVerifier

logger = logging.getLogger(__name__)


class LoginRole(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"
    CUSTOMER = "customer"

    @classmethod
    def for_request(cls, password: str | None, is_employee: bool) -> "LoginRole":
        if is_employee:
            return cls.EMPLOYEE
        if password:
            return cls.ADMIN
        return cls.CUSTOMER

    @property
    def needs_password(self) -> bool:
        return self is not LoginRole.CUSTOMER


class IdentityResolver:
    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts
        self._credentials = CredentialVerifier(accounts)

    async def resolve(
        self,
        username: str,
        password: str | None,
        role: LoginRole,
    ) -> CurrentIdentity:
        """Return the single matching account or raise ``NotFound`` / ``Forbidden``.

        The result is a detached snapshot, so a rolled-back upgrade cannot
        expire it.
        """
        if role is LoginRole.EMPLOYEE:
            user = await self._accounts.find_employee_by_username(username)
        elif role is LoginRole.ADMIN:
            user = await self._accounts.find_admin_by_username(username)
        else:
            user = await self._accounts.find_customer_by_username(username)

        if user is None:
            raise NotFound(f"No {role.value} account named {username!r}")
        identity = CurrentIdentity.model_validate(user)

        if role.needs_password:
            # capture before a possible upgrade rewrites it
            stored = user.password_hash
            if not self._credentials.verify(password or "", stored):
                raise Forbidden(f"Password rejected for {role.value} {username!r}")
            await self._credentials.maybe_upgrade(identity.id, password or "", stored)

        return identity

    async def resolve_by_slug(self, slug: str) -> CurrentIdentity:
        """QR path: customers only, no password."""
        user = await self._accounts.find_customer_by_slug(slug)
        if user is None:
            raise NotFound(f"No customer account with slug {slug!r}")
        return CurrentIdentity.model_validate(user)
