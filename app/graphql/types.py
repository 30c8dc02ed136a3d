# app/graphql/types.py
import dataclasses
import uuid
from datetime import datetime
from typing import Any, Optional

import strawberry
from strawberry.types import Info

from app.graphql.context import category_service, order_repo, product_service, user_repo
from app.models.order import OrderStatus
from app.models.user import Role

OrderStatusEnum = strawberry.enum(OrderStatus, name="OrderStatus")
RoleEnum = strawberry.enum(Role, name="Role")


def input_to_dict(data: Any) -> dict[str, Any]:
    """
    Strawberry input -> plain dict for the pydantic schemas.

    Omitted fields are dropped. An explicit null is kept only for fields
    declared with an UNSET default, where it means "clear this value".
    """
    if data is None:
        return {}
    values = {}
    for field in dataclasses.fields(data):
        value = getattr(data, field.name)
        if value is strawberry.UNSET:
            continue
        if value is None and field.default is not strawberry.UNSET:
            continue
        values[field.name] = _plain(value)
    return values


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return input_to_dict(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Object types
# ---------------------------------------------------------------------------


@strawberry.type(name="Category")
class CategoryType:
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    @strawberry.field
    def products(self, info: Info) -> list["ProductType"]:
        rows = product_service.products_in_category(info.context.session, self.id)
        return [ProductType.from_row(row) for row in rows]

    @classmethod
    def from_row(cls, row) -> "CategoryType":
        return cls(
            id=row.id,
            name=row.name,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@strawberry.type(name="Product")
class ProductType:
    id: uuid.UUID
    name: str
    description: Optional[str]
    price: float
    qte_in_stock: int
    category_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: Optional[datetime] = None

    @strawberry.field
    def category(self, info: Info) -> Optional[CategoryType]:
        if self.category_id is None:
            return None
        row = category_service.get_category(info.context.session, self.category_id)
        return CategoryType.from_row(row) if row else None

    @classmethod
    def from_row(cls, row) -> "ProductType":
        return cls(
            id=row.id,
            name=row.name,
            description=row.description,
            price=row.price,
            qte_in_stock=row.qte_in_stock,
            category_id=row.category_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@strawberry.type(name="User")
class UserType:
    id: uuid.UUID
    email: str
    name: str
    role: Optional[RoleEnum]
    phone_number: Optional[str]
    address: Optional[str]
    image_url: Optional[str]
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "UserType":
        return cls(
            id=row.id,
            email=row.email,
            name=row.name,
            role=row.role,
            phone_number=row.phone_number,
            address=row.address,
            image_url=row.image_url,
            created_at=row.created_at,
        )


@strawberry.type(name="OrderItem")
class OrderItemType:
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    qte: int
    unit_price: float

    @strawberry.field
    def line_total(self) -> float:
        return round(self.qte * self.unit_price, 2)

    @strawberry.field
    def product(self, info: Info) -> Optional[ProductType]:
        row = product_service.get_product(info.context.session, self.product_id)
        return ProductType.from_row(row) if row else None

    @classmethod
    def from_row(cls, row) -> "OrderItemType":
        return cls(
            id=row.id,
            order_id=row.order_id,
            product_id=row.product_id,
            qte=row.qte,
            unit_price=row.unit_price,
        )


@strawberry.type(name="Order")
class OrderType:
    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatusEnum
    total: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    @strawberry.field
    def items(self, info: Info) -> list[OrderItemType]:
        rows = order_repo.list_items_for_order(info.context.session, self.id)
        return [OrderItemType.from_row(row) for row in rows]

    @strawberry.field
    def user(self, info: Info) -> Optional[UserType]:
        row = user_repo.get_by_id(info.context.session, self.user_id)
        return UserType.from_row(row) if row else None

    @classmethod
    def from_row(cls, row) -> "OrderType":
        return cls(
            id=row.id,
            user_id=row.user_id,
            status=row.status,
            total=row.total,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@strawberry.input
class ProductFilterInput:
    search_query: Optional[str] = None
    stock: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    category_id: Optional[uuid.UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    limit: Optional[int] = None
    current_page: Optional[int] = None
    offset: Optional[int] = None


@strawberry.input
class CategoryFilterInput:
    search_query: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    limit: Optional[int] = None
    current_page: Optional[int] = None
    offset: Optional[int] = None


@strawberry.input
class OrderFilterInput:
    search_query: Optional[str] = None
    status: Optional[OrderStatusEnum] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    limit: Optional[int] = None
    current_page: Optional[int] = None
    offset: Optional[int] = None


@strawberry.input
class UserFilterInput:
    search_query: Optional[str] = None
    role: Optional[RoleEnum] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    limit: Optional[int] = None
    current_page: Optional[int] = None
    offset: Optional[int] = None


@strawberry.input
class ProductInput:
    name: str
    price: float
    qte_in_stock: int
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = None


@strawberry.input
class ProductUpdateInput:
    # UNSET = leave as is, null = clear (description, categoryId)
    name: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    price: Optional[float] = strawberry.UNSET
    qte_in_stock: Optional[int] = strawberry.UNSET
    category_id: Optional[uuid.UUID] = strawberry.UNSET


@strawberry.input
class CategoryInput:
    name: str


@strawberry.input
class OrderItemInput:
    product_id: uuid.UUID
    qte: int


@strawberry.input
class OrderInput:
    items: list[OrderItemInput]
    total: float
