"""Pydantic schemas for account management and occupancy."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator


class UserCreate(BaseModel):
    username: str
    phone: str | None = None
    password: str | None = None
    is_admin: bool = False
    is_employee: bool = False

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be empty")
        if len(v) > 100:
            raise ValueError("Username must not exceed 100 characters")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        if v is not None and "\x00" in v:
            raise ValueError("Password must not contain NUL characters")
        return v

    @model_validator(mode="after")
    def _roles(self) -> "UserCreate":
        if self.is_admin and self.is_employee:
            raise ValueError("An account cannot be both admin and employee")
        if (self.is_admin or self.is_employee) and not self.password:
            raise ValueError("Staff accounts require a password")
        if (self.is_admin or self.is_employee) and not (self.phone or "").strip():
            raise ValueError("Staff accounts require a phone number")
        return self


class UserRead(BaseModel):
    id: str
    username: str
    phone: str
    slug: str
    is_admin: bool
    is_employee: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class TableRead(BaseModel):
    id: str
    username: str

    model_config = {"from_attributes": True}


class UserLink(BaseModel):
    username: str
    slug: str
    url: str


class ActiveSessionRead(BaseModel):
    user_id: str
    username: str
    login_at: datetime | None
    last_activity: datetime | None

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool
    message: str
