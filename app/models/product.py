# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Matches ERD:
      - id, name, description, price, qte_in_stock, category_id,
        created_at, updated_at
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        min_length=3,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional long description",
    )

    price: float = Field(
        ge=0,
        description="Unit price",
    )

    qte_in_stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    category_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime | None = None
