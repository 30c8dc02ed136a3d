# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from app.models.order import OrderStatus
from app.schemas.filters import PageParams, blank_to_none

OrderSortField = Literal["id", "total", "status", "createdAt", "user.name"]


class OrderItemCreate(SQLModel):
    """
    One requested line: product + quantity.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    qte: int = Field(gt=0)


class OrderCreate(SQLModel):
    """
    Payload for submitting an order.

    The caller supplies the items and the total it computed; the backend
    derives:
      - user_id from token
      - status = PENDING
      - unit prices from the current catalog (total is re-checked)
    """

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemCreate] = Field(min_length=1)
    total: float = Field(ge=0)

    @field_validator("items")
    @classmethod
    def no_duplicate_products(cls, v: list[OrderItemCreate]) -> list[OrderItemCreate]:
        seen: set[uuid.UUID] = set()
        for item in v:
            if item.product_id in seen:
                raise ValueError(f"Duplicate product in order items: {item.product_id}")
            seen.add(item.product_id)
        return v

    @model_validator(mode="after")
    def total_matches_items(self):
        # Full price check happens against the catalog in OrderService
        if self.items and self.total == 0:
            raise ValueError("Total does not match the sum of item prices")
        return self


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    qte: int
    unit_price: float
    line_total: float


class OrderRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatus
    total: float
    created_at: datetime
    updated_at: datetime | None = None


class OrderWithItemsRead(OrderRead):
    items: list[OrderItemRead]


class OrderFilter(PageParams):
    """
    Admin order table filter.

    search_query matches the customer's name / email, or the exact order id.
    """

    status: OrderStatus | None = None
    sort_by: OrderSortField | None = None

    @field_validator("status", mode="before")
    @classmethod
    def empty_status_is_none(cls, v):
        return blank_to_none(v)
