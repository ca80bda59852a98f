"""Pydantic schemas for the current identity and the login / register calls."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class CurrentIdentity(BaseModel):
    """The subset of an account that is safe to keep on the terminal."""

    id: str
    username: str
    phone: str = ""
    is_admin: bool = False
    is_employee: bool = False
    slug: str = ""

    model_config = {"from_attributes": True}

    @field_validator("phone", "slug", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def is_customer(self) -> bool:
        return not self.is_admin and not self.is_employee

    @property
    def is_staff(self) -> bool:
        return self.is_admin or self.is_employee

    @classmethod
    def from_stored(cls, data: dict[str, Any]) -> "CurrentIdentity":
        """Rebuild from a persisted record, defaulting anything missing."""
        return cls(
            id=str(data.get("id") or ""),
            username=str(data.get("username") or ""),
            phone=str(data.get("phone") or ""),
            is_admin=bool(data.get("is_admin")),
            is_employee=bool(data.get("is_employee")),
            slug=str(data.get("slug") or ""),
        )

    def to_stored(self) -> dict[str, Any]:
        """Persisted form; phone is always blanked."""
        return {**self.model_dump(), "phone": ""}


class LoginRequest(BaseModel):
    username: str
    password: str | None = None
    is_employee: bool = False

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be empty")
        return v


class SlugLoginRequest(BaseModel):
    slug: str

    @field_validator("slug")
    @classmethod
    def _slug(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Slug must not be empty")
        return v


class QrLoginRequest(BaseModel):
    payload: str


class RegisterRequest(BaseModel):
    username: str
    phone: str
    password: str
    admin_username: str
    admin_password: str
    role: str = "employee"

    @field_validator("username", "phone", "admin_username")
    @classmethod
    def _required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be empty")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if "\x00" in v:
            raise ValueError("Password must not contain NUL characters")
        return v

    @field_validator("role")
    @classmethod
    def _role(cls, v: str) -> str:
        if v not in {"admin", "employee"}:
            raise ValueError("Role must be 'admin' or 'employee'")
        return v


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: CurrentIdentity | None = None
