# app/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import SQLModel, Field

# Fixed key the durable cart snapshot is stored under
CART_STORAGE_KEY = "cart"


class CartSnapshot(SQLModel, table=True):
    """
    Durable mirror of a customer's cart.

    One row per (owner_id, key); `items` holds the full list of line items
    as JSON and is overwritten after every cart mutation.
    """

    __tablename__ = "cart_snapshots"
    __table_args__ = (UniqueConstraint("owner_id", "key"),)

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    owner_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    key: str = Field(default=CART_STORAGE_KEY, max_length=50)

    items: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
