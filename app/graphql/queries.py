# app/graphql/queries.py
import uuid
from typing import Optional

import strawberry
from strawberry.types import Info

from app.core.errors import validate_payload
from app.graphql.context import (
    category_service,
    order_service,
    product_service,
    user_service,
)
from app.graphql.types import (
    CategoryFilterInput,
    CategoryType,
    OrderFilterInput,
    OrderItemType,
    OrderType,
    ProductFilterInput,
    ProductType,
    UserFilterInput,
    UserType,
    input_to_dict,
)
from app.schemas.category import CategoryFilter
from app.schemas.filters import HeadParams
from app.schemas.order import OrderFilter
from app.schemas.product import ProductFilter
from app.schemas.user import UserFilter


def _product_filter(filter: Optional[ProductFilterInput], **extra) -> ProductFilter:
    data = input_to_dict(filter)
    data.update({k: v for k, v in extra.items() if v is not None})
    return validate_payload(ProductFilter, data)


@strawberry.type
class Query:
    # ---- Catalog: products ----

    @strawberry.field
    def products(self, info: Info) -> list[ProductType]:
        rows = product_service.list_products(info.context.session)
        return [ProductType.from_row(row) for row in rows]

    @strawberry.field
    def paginated_products(
        self,
        info: Info,
        filter: Optional[ProductFilterInput] = None,
    ) -> list[ProductType]:
        rows = product_service.list_products(info.context.session, _product_filter(filter))
        return [ProductType.from_row(row) for row in rows]

    @strawberry.field
    def infinite_products(
        self,
        info: Info,
        limit: int,
        offset: int = 0,
        filter: Optional[ProductFilterInput] = None,
    ) -> list[ProductType]:
        filters = _product_filter(filter, limit=limit, offset=offset)
        rows = product_service.list_products(info.context.session, filters)
        return [ProductType.from_row(row) for row in rows]

    @strawberry.field
    def product(self, info: Info, id: uuid.UUID) -> Optional[ProductType]:
        row = product_service.get_product(info.context.session, id)
        return ProductType.from_row(row) if row else None

    @strawberry.field
    def products_count(self, info: Info) -> int:
        return product_service.count_products(info.context.session)

    @strawberry.field
    def filtered_products_count(
        self,
        info: Info,
        filter: Optional[ProductFilterInput] = None,
    ) -> int:
        return product_service.count_products(info.context.session, _product_filter(filter))

    @strawberry.field
    def available_products_count(self, info: Info) -> int:
        return product_service.count_available_products(info.context.session)

    @strawberry.field
    def featured_products(self, info: Info, head: int) -> list[ProductType]:
        params = validate_payload(HeadParams, {"head": head})
        rows = product_service.featured_products(info.context.session, params)
        return [ProductType.from_row(row) for row in rows]

    # ---- Catalog: categories ----

    @strawberry.field
    def categories(
        self,
        info: Info,
        filter: Optional[CategoryFilterInput] = None,
    ) -> list[CategoryType]:
        filters = validate_payload(CategoryFilter, input_to_dict(filter)) if filter else None
        rows = category_service.list_categories(info.context.session, filters)
        return [CategoryType.from_row(row) for row in rows]

    @strawberry.field
    def featured_categories(self, info: Info, head: int) -> list[CategoryType]:
        params = validate_payload(HeadParams, {"head": head})
        rows = category_service.featured_categories(info.context.session, params)
        return [CategoryType.from_row(row) for row in rows]

    @strawberry.field
    def category(self, info: Info, id: uuid.UUID) -> Optional[CategoryType]:
        row = category_service.get_category(info.context.session, id)
        return CategoryType.from_row(row) if row else None

    @strawberry.field
    def count_filtered_categories(
        self,
        info: Info,
        search_query: Optional[str] = None,
    ) -> int:
        filters = validate_payload(CategoryFilter, {"search_query": search_query})
        return category_service.count_categories(info.context.session, filters)

    # ---- Orders ----

    @strawberry.field
    def orders(
        self,
        info: Info,
        filter: Optional[OrderFilterInput] = None,
    ) -> list[OrderType]:
        filters = validate_payload(OrderFilter, input_to_dict(filter))
        rows = order_service.list_orders(info.context.session, filters)
        return [OrderType.from_row(row) for row in rows]

    @strawberry.field
    def filtered_orders_count(
        self,
        info: Info,
        filter: Optional[OrderFilterInput] = None,
    ) -> int:
        filters = validate_payload(OrderFilter, input_to_dict(filter))
        return order_service.count_filtered_orders(info.context.session, filters)

    @strawberry.field
    def orders_count(self, info: Info) -> int:
        return order_service.count_orders(info.context.session)

    @strawberry.field
    def active_orders_count(self, info: Info) -> int:
        return order_service.count_active_orders(info.context.session)

    @strawberry.field
    def order(self, info: Info, id: uuid.UUID) -> OrderType:
        row = order_service.get_order(info.context.session, info.context.user, id)
        return OrderType.from_row(row)

    @strawberry.field
    def my_orders(self, info: Info) -> list[OrderType]:
        rows = order_service.my_orders(info.context.session, info.context.user)
        return [OrderType.from_row(row) for row in rows]

    @strawberry.field
    def order_items(self, info: Info, order_id: uuid.UUID) -> list[OrderItemType]:
        rows = order_service.list_items(info.context.session, info.context.user, order_id)
        return [OrderItemType.from_row(row) for row in rows]

    @strawberry.field
    def order_item(self, info: Info, id: uuid.UUID) -> Optional[OrderItemType]:
        row = order_service.get_item(info.context.session, info.context.user, id)
        return OrderItemType.from_row(row) if row else None

    # ---- Users ----

    @strawberry.field
    def me(self, info: Info) -> UserType:
        return UserType.from_row(info.context.user)

    @strawberry.field
    def users(
        self,
        info: Info,
        filter: Optional[UserFilterInput] = None,
    ) -> list[UserType]:
        filters = validate_payload(UserFilter, input_to_dict(filter))
        rows = user_service.list_users(info.context.session, filters)
        return [UserType.from_row(row) for row in rows]

    @strawberry.field
    def user(self, info: Info, id: uuid.UUID) -> UserType:
        row = user_service.get_user(info.context.session, info.context.user, id)
        return UserType.from_row(row)

    @strawberry.field
    def users_count(
        self,
        info: Info,
        filter: Optional[UserFilterInput] = None,
    ) -> int:
        filters = validate_payload(UserFilter, input_to_dict(filter))
        return user_service.count_users(info.context.session, filters)

    @strawberry.field
    def customers_count(self, info: Info) -> int:
        return user_service.count_customers(info.context.session)
