"""Tests for identity resolution and the legacy password upgrade."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Forbidden, NotFound
from app.core.security import is_strong_hash, verify_password
from app.models.user import User
from app.repositories.accounts import AccountRepository
from app.services.identity import IdentityResolver, LoginRole


async def _stored_hash(session_factory, user_id: str) -> str | None:
    async with session_factory() as db:
        return (await db.get(User, user_id)).password_hash


def test_role_selection():
    assert LoginRole.for_request(None, True) is LoginRole.EMPLOYEE
    assert LoginRole.for_request("pw", True) is LoginRole.EMPLOYEE
    assert LoginRole.for_request("pw", False) is LoginRole.ADMIN
    assert LoginRole.for_request(None, False) is LoginRole.CUSTOMER
    assert LoginRole.for_request("", False) is LoginRole.CUSTOMER


@pytest.mark.asyncio
async def test_legacy_password_upgraded_on_success(create_account, session_factory):
    user = await create_account("Ana", password="secret1", hashed=False, is_employee=True)

    async with session_factory() as db:
        identity = await IdentityResolver(AccountRepository(db)).resolve(
            "Ana", "secret1", LoginRole.EMPLOYEE
        )
    assert identity.id == user.id

    stored = await _stored_hash(session_factory, user.id)
    assert is_strong_hash(stored)
    assert stored != "secret1"
    assert verify_password("secret1", stored) is True


@pytest.mark.asyncio
async def test_failed_attempt_never_upgrades(create_account, session_factory):
    user = await create_account("Ana", password="secret1", hashed=False, is_employee=True)

    async with session_factory() as db:
        with pytest.raises(Forbidden):
            await IdentityResolver(AccountRepository(db)).resolve(
                "Ana", "wrong", LoginRole.EMPLOYEE
            )
    assert await _stored_hash(session_factory, user.id) == "secret1"


@pytest.mark.asyncio
async def test_hashed_password_left_alone(create_account, session_factory):
    user = await create_account("Boss", password="admin123", is_admin=True)
    before = await _stored_hash(session_factory, user.id)

    async with session_factory() as db:
        await IdentityResolver(AccountRepository(db)).resolve("Boss", "admin123", LoginRole.ADMIN)
    assert await _stored_hash(session_factory, user.id) == before


@pytest.mark.asyncio
async def test_employee_path_excludes_admins(create_account, db_session: AsyncSession):
    await create_account("Boss", password="admin123", is_admin=True)
    resolver = IdentityResolver(AccountRepository(db_session))
    with pytest.raises(NotFound):
        await resolver.resolve("Boss", "admin123", LoginRole.EMPLOYEE)


@pytest.mark.asyncio
async def test_admin_path_excludes_employees(create_account, db_session: AsyncSession):
    await create_account("Ana", password="secret1", is_employee=True)
    resolver = IdentityResolver(AccountRepository(db_session))
    with pytest.raises(NotFound):
        await resolver.resolve("Ana", "secret1", LoginRole.ADMIN)


@pytest.mark.asyncio
async def test_customer_path_needs_no_password(create_account, db_session: AsyncSession):
    await create_account("05", phone="0000000000")
    resolver = IdentityResolver(AccountRepository(db_session))
    identity = await resolver.resolve("05", None, LoginRole.CUSTOMER)
    assert identity.username == "05"
    assert identity.is_customer


@pytest.mark.asyncio
async def test_customer_path_excludes_staff(create_account, db_session: AsyncSession):
    await create_account("Ana", password="secret1", is_employee=True)
    resolver = IdentityResolver(AccountRepository(db_session))
    with pytest.raises(NotFound):
        await resolver.resolve("Ana", None, LoginRole.CUSTOMER)


@pytest.mark.asyncio
async def test_employee_without_password_is_forbidden(create_account, db_session: AsyncSession):
    await create_account("Ana", password="secret1", is_employee=True)
    resolver = IdentityResolver(AccountRepository(db_session))
    with pytest.raises(Forbidden):
        await resolver.resolve("Ana", None, LoginRole.EMPLOYEE)


@pytest.mark.asyncio
async def test_slug_lookup_is_customer_only(create_account, db_session: AsyncSession):
    await create_account("07", slug="07-aaaa1111")
    await create_account("Ana", password="secret1", is_employee=True, slug="ana-bbbb2222")
    resolver = IdentityResolver(AccountRepository(db_session))

    assert (await resolver.resolve_by_slug("07-aaaa1111")).username == "07"
    with pytest.raises(NotFound):
        await resolver.resolve_by_slug("ana-bbbb2222")
