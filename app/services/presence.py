"""
Best-effort occupancy bookkeeping in ``active_sessions``.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.repositories.sessions import SessionRepository

logger = logging.getLogger(__name__)


class SessionRegistrar:
    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    async def register(self, account_id: str, username: str, via_qr: bool = False) -> bool:
        """Upsert the occupancy row. Never raises; login does not depend on it."""
        session = self._sessions.session
        try:
            await self._sessions.upsert(account_id, username)
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to register session for %s: %s", username, exc)
            return False
        logger.info("Session registered for %s%s", username, " (via QR code)" if via_qr else "")
        return True
