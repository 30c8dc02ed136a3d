# app/models/order.py
import enum
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"
    COMPLETED = "COMPLETED"


class Order(SQLModel, table=True):
    """
    Customer order.

    Matches ERD:
      - id, user_id, status, total, created_at, updated_at

    Orders are never deleted; admins only move them through the status
    lifecycle.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        index=True,
        description="Order status lifecycle",
    )

    # Sum of unit_price * qte, recomputed server-side at submission
    total: float = Field(
        ge=0,
        description="Final amount for this order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime | None = None


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order. Immutable once created.

    Matches ERD:
      - id, order_id, product_id, qte, unit_price
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    qte: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Unit price at time of order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
