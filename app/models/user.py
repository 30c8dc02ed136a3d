# app/models/user.py
import enum
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Role(str, enum.Enum):
    """Application role. Guests are represented by a missing token."""

    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Role:
      - None until the customer completes sign-up
      - CUSTOMER | ADMIN afterwards; never editable by the user

    This table is *not* responsible for password hashes. Supabase Auth
    stores the password in its own schema. We only mirror identity,
    contact details, and application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    name: str = Field(
        max_length=150,
        description="Customer display name; first part of email by default",
    )

    role: Role | None = Field(
        default=None,
        index=True,
        description="Application role: CUSTOMER | ADMIN (None = sign-up pending)",
    )

    phone_number: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=500)

    image_url: str | None = Field(
        default=None,
        description="Avatar public URL in Supabase Storage",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime | None = None
