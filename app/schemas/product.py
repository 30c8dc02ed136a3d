# app/schemas/product.py
import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from app.schemas.filters import PageParams, blank_to_none

# Letters (any script), digits, spaces, hyphens and quotes
_PRODUCT_TEXT = re.compile(r"^[\w\s\-'\"]+$")

# Stock buckets used by catalog filters
LOW_STOCK_THRESHOLD = 10
StockState = Literal["In Stock", "Low Stock", "Out Stock"]
ProductSortField = Literal["id", "name", "price", "stock", "createdAt"]


def _check_name(v: str) -> str:
    v = v.strip()
    if len(v) < 3:
        raise ValueError("Product name must be at least 3 characters")
    if not _PRODUCT_TEXT.match(v):
        raise ValueError("Product name contains invalid characters")
    return v


def _check_description(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not _PRODUCT_TEXT.match(v):
        raise ValueError("Product description contains invalid characters")
    return v


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price: float = Field(ge=0)
    qte_in_stock: int = Field(ge=0)
    category_id: uuid.UUID | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    Omitted fields are left alone; description and category_id may be
    sent as null to clear them.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price: float | None = Field(default=None, ge=0)
    qte_in_stock: int | None = Field(default=None, ge=0)
    category_id: uuid.UUID | None = None

    @field_validator("name", "price", "qte_in_stock")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v)


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    description: str | None = None
    price: float
    qte_in_stock: int
    category_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ProductFilter(PageParams):
    """
    Catalog filters shared by list and count queries.
    """

    stock: StockState | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    category_id: uuid.UUID | None = None
    sort_by: ProductSortField | None = None

    @field_validator("stock", "category_id", mode="before")
    @classmethod
    def empty_filter_is_none(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def check_price_window(self):
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.max_price < self.min_price
        ):
            raise ValueError("Max price cannot be below min price")
        return self
