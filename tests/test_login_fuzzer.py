import random
import string

import pytest
from httpx import AsyncClient

# Random and hostile input against the login routes


def generate_garbage(length=100):
    return "".join(random.choices(string.ascii_letters + string.digits + "!@#$%^&*() ", k=length))


def generate_sql_injection():
    payloads = ["' OR '1'='1", "'; DROP TABLE users--", "admin'--", "' UNION SELECT 1,2,3--"]
    return random.choice(payloads)


def generate_xss():
    payloads = ["<script>alert(1)</script>", "<img src=x onerror=alert(1)>", "javascript:alert(1)"]
    return random.choice(payloads)


@pytest.mark.asyncio
async def test_fuzz_table_login(async_client: AsyncClient, create_account):
    """Garbage table names must fail cleanly and never log anyone in."""
    await create_account("05")
    for i in range(60):
        username = generate_garbage(random.randint(1, 120))
        if i % 10 == 0:
            username = generate_sql_injection()
        if i % 11 == 0:
            username = generate_xss()

        resp = await async_client.post("/api/v1/auth/login", json={"username": username})
        assert resp.status_code in [401, 422], f"Login crashed on: {username!r}"


@pytest.mark.asyncio
async def test_fuzz_staff_login(async_client: AsyncClient, create_account):
    await create_account("Boss", password="admin123", is_admin=True)
    for i in range(30):
        password = generate_sql_injection() if i % 5 == 0 else generate_garbage(60)
        resp = await async_client.post(
            "/api/v1/auth/login",
            json={"username": "Boss", "password": password, "is_employee": bool(i % 2)},
        )
        assert resp.status_code == 401, f"Unexpected {resp.status_code} for {password!r}"


@pytest.mark.asyncio
async def test_fuzz_qr_payloads(async_client: AsyncClient):
    payloads = ["", "{", "[]", '{"table": null}', "https://", "http://x/..", generate_xss()]
    payloads += [generate_garbage(random.randint(1, 200)) for _ in range(30)]
    for payload in payloads:
        resp = await async_client.post("/api/v1/auth/login/qr", json={"payload": payload})
        assert resp.status_code == 401, f"QR login crashed on: {payload!r}"
