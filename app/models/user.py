"""
User model — every principal, from customer tables to admins.

Both role flags false means a customer ("table") account, which has no
password and logs in by selection or QR slug.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from app.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=_new_id)  # type: ignore[assignment]
    username: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    phone: str = Column(String(30), nullable=False, default="")  # type: ignore[assignment]
    # bcrypt hash, or a legacy plaintext value upgraded on next login
    password_hash: str | None = Column(String(128), nullable=True)  # type: ignore[assignment]
    slug: str = Column(String(120), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    is_admin: bool = Column(Boolean, nullable=False, default=False, server_default="false")  # type: ignore[assignment]
    is_employee: bool = Column(Boolean, nullable=False, default=False, server_default="false")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_customer(self) -> bool:
        return not self.is_admin and not self.is_employee
