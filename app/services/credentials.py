"""
Credential checks plus the lazy plaintext -> bcrypt migration.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.core.security import get_password_hash, needs_upgrade, verify_password
from app.repositories.accounts import AccountRepository

logger = logging.getLogger(__name__)


class CredentialVerifier:
    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts

    @staticmethod
    def verify(plain: str, stored: str | None) -> bool:
        return verify_password(plain, stored)

    async def maybe_upgrade(self, account_id: str, plain: str, stored: str | None) -> bool:
        """Re-hash a legacy plaintext credential that *plain* just matched.

        Returns True when a new hash was written. A failed write leaves the
        legacy value in place and is retried on the next login.
        """
        if not needs_upgrade(plain, stored):
            return False
        session = self._accounts.session
        try:
            await self._accounts.update_password_hash(account_id, get_password_hash(plain))
            await session.commit()
        except (SQLAlchemyError, ValueError) as exc:
            # ValueError: passlib refuses the value (e.g. a NUL byte)
            await session.rollback()
            logger.warning("Password hash upgrade failed for %s: %s", account_id, exc)
            return False
        logger.info("Upgraded legacy password to bcrypt for %s", account_id)
        return True
