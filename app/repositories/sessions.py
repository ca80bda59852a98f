"""Occupancy rows in ``active_sessions``: upsert on login, delete when staff free a table."""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.active_session import ActiveSession

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SessionRepository:
    """Occupancy rows in ``active_sessions``, keyed by ``user_id``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: str) -> ActiveSession | None:
        stmt = select(ActiveSession).where(ActiveSession.user_id == user_id)
        return (await self.session.scalars(stmt)).one_or_none()

    async def list_all(self) -> list[ActiveSession]:
        stmt = select(ActiveSession).order_by(ActiveSession.username)
        return list(await self.session.scalars(stmt))

    async def upsert(self, user_id: str, username: str) -> None:
        now = datetime.now(timezone.utc)
        values = {
            "user_id": user_id,
            "username": username,
            "login_at": now,
            "last_activity": now,
        }
        insert = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(ActiveSession).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[ActiveSession.user_id],
                set_={k: stmt.excluded[k] for k in ("username", "login_at", "last_activity")},
            )
            await self.session.execute(stmt)
            return

        row = await self.get_by_user_id(user_id)
        if row is None:
            self.session.add(ActiveSession(**values))
        else:
            row.username = username
            row.login_at = now
            row.last_activity = now
        await self.session.flush()

    async def delete_for_user(self, user_id: str) -> bool:
        result = await self.session.execute(
            delete(ActiveSession).where(ActiveSession.user_id == user_id)
        )
        return result.rowcount > 0
