# app/schemas/user.py
import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.models.user import Role
from app.schemas.filters import PageParams, blank_to_none

UserSortField = Literal["name", "email", "role", "createdAt"]

_PHONE = re.compile(r"^(\+213[0-9]{9}|[0-9]{10})$")
_PHONE_FORMATTING = re.compile(r"[\s\-()]")
_ADDRESS = re.compile(r"^[\w\s,.\-()/\\]+$")


def _check_name(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 50:
        raise ValueError("Name must be between 3 and 50 characters long")
    if not all(ch.isalpha() or ch.isspace() for ch in v):
        raise ValueError("Name must contain only letters and spaces")
    return v


def _check_phone(v: str) -> str:
    # 0556-666666 or (0556)666666 become 0556666666
    v = _PHONE_FORMATTING.sub("", v)
    if not _PHONE.match(v):
        raise ValueError(
            "Phone number must be 10 digits or +213 followed by 9 digits"
        )
    return v


def _check_address(v: str) -> str:
    v = v.strip()
    if not 10 <= len(v) <= 500:
        raise ValueError("Address must be between 10 and 500 characters long")
    if not _ADDRESS.match(v):
        raise ValueError("Address contains invalid characters")
    return v


class CompleteSignUp(SQLModel):
    """
    Payload for first-time profile completion (after Supabase sign-up).

    Email comes from the token and cannot be set here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    phone_number: str
    address: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _check_address(v)


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Email and role are not editable.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    phone_number: str | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _check_name(v) if v is not None else v

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return _check_phone(v) if v is not None else v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        return _check_address(v) if v is not None else v


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str
    role: Role | None = None
    phone_number: str | None = None
    address: str | None = None
    image_url: str | None = None
    created_at: datetime


class UserFilter(PageParams):
    """Admin user table filter."""

    role: Role | None = None
    sort_by: UserSortField | None = None

    @field_validator("role", mode="before")
    @classmethod
    def empty_role_is_none(cls, v):
        return blank_to_none(v)
