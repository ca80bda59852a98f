"""Account lookups and writes over the ``users`` table."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class AccountRepository:
    """Fixed lookups over the ``users`` table, one per login path."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        """Any role. Used for the uniqueness pre-check."""
        stmt = select(User).where(User.username == username)
        return (await self.session.scalars(stmt)).one_or_none()

    async def find_employee_by_username(self, username: str) -> User | None:
        stmt = select(User).where(
            User.username == username,
            User.is_employee.is_(True),
            User.is_admin.is_(False),
        )
        return (await self.session.scalars(stmt)).one_or_none()

    async def find_admin_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username, User.is_admin.is_(True))
        return (await self.session.scalars(stmt)).one_or_none()

    async def find_customer_by_username(self, username: str) -> User | None:
        stmt = select(User).where(
            User.username == username,
            User.is_admin.is_(False),
            User.is_employee.is_(False),
        )
        return (await self.session.scalars(stmt)).one_or_none()

    async def find_customer_by_slug(self, slug: str) -> User | None:
        stmt = select(User).where(
            User.slug == slug,
            User.is_admin.is_(False),
            User.is_employee.is_(False),
        )
        return (await self.session.scalars(stmt)).one_or_none()

    async def list_customers(self) -> list[User]:
        stmt = (
            select(User)
            .where(User.is_admin.is_(False), User.is_employee.is_(False))
            .order_by(User.username)
        )
        return list(await self.session.scalars(stmt))

    async def list_all(self) -> list[User]:
        return list(await self.session.scalars(select(User).order_by(User.username)))

    async def create(self, create_data: dict[str, Any]) -> User:
        user = User(**create_data)
        self.session.add(user)
        await self.session.flush()
        return user

    async def update_password_hash(self, user_id: str, new_hash: str) -> None:
        await self.session.execute(
            update(User).where(User.id == user_id).values(password_hash=new_hash)
        )

    async def set_roles(self, user: User, *, is_admin: bool, is_employee: bool) -> User:
        """Apply role flags; callers never pass both as true."""
        if is_admin and is_employee:
            raise ValueError("An account cannot be both admin and employee")
        user.is_admin = is_admin
        user.is_employee = is_employee
        await self.session.flush()
        return user

    async def delete(self, user_id: str) -> bool:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0
