"""
Password hashing (bcrypt) with legacy plaintext fallback, and signing of
the identity record kept in local storage.
"""

from __future__ import annotations

import re
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY

# $2a$, $2b$ or $2y$; any other password_hash value is legacy plaintext
_BCRYPT_RE = re.compile(r"^\$2[aby]\$")


# ── Passwords ───────────────────────────────────────────────────────
def is_strong_hash(stored: str | None) -> bool:
    return bool(stored) and _BCRYPT_RE.match(stored) is not None


def verify_password(plain: str, stored: str | None) -> bool:
    """Check *plain* against a bcrypt hash, or a legacy plaintext value."""
    if not stored:
        return False
    if is_strong_hash(stored):
        try:
            return pwd_context.verify(plain, stored)
        except ValueError:
            # malformed hash body
            return False
    return plain == stored


def needs_upgrade(plain: str, stored: str | None) -> bool:
    """True only for a legacy plaintext value that *plain* just matched."""
    return bool(stored) and not is_strong_hash(stored) and plain == stored


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── Persisted identity ──────────────────────────────────────────────
def sign_identity(claims: dict[str, Any]) -> str:
    return jwt.encode({**claims, "type": "identity"}, _SECRET, algorithm=_ALGORITHM)


def read_identity(token: str) -> dict | None:
    """Return the claims if *token* is a valid identity record, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
        if payload.get("type") != "identity":
            return None
        payload.pop("type", None)
        return payload
    except JWTError:
        return None
