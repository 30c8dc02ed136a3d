# app/graphql/mutations.py
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
    CategoryInput,
    CategoryType,
    OrderInput,
    OrderStatusEnum,
    OrderType,
    ProductInput,
    ProductType,
    ProductUpdateInput,
    UserType,
    input_to_dict,
)
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.schemas.order import OrderCreate, OrderStatusUpdate
from app.schemas.product import ProductCreate, ProductUpdate
from app.schemas.user import CompleteSignUp, UserUpdate


@strawberry.type
class Mutation:
    # ---- Products (admin) ----

    @strawberry.mutation
    def add_new_product(self, info: Info, input: ProductInput) -> ProductType:
        payload = validate_payload(ProductCreate, input_to_dict(input))
        row = product_service.create_product(info.context.session, payload)
        return ProductType.from_row(row)

    @strawberry.mutation
    def update_product(
        self,
        info: Info,
        id: uuid.UUID,
        input: ProductUpdateInput,
    ) -> ProductType:
        payload = validate_payload(ProductUpdate, input_to_dict(input))
        row = product_service.update_product(info.context.session, id, payload)
        return ProductType.from_row(row)

    @strawberry.mutation
    def delete_product(self, info: Info, id: uuid.UUID) -> ProductType:
        return ProductType.from_row(product_service.delete_product(info.context.session, id))

    # ---- Categories (admin) ----

    @strawberry.mutation
    def create_category(self, info: Info, input: CategoryInput) -> CategoryType:
        payload = validate_payload(CategoryCreate, input_to_dict(input))
        row = category_service.create_category(info.context.session, payload)
        return CategoryType.from_row(row)

    @strawberry.mutation
    def update_category(
        self,
        info: Info,
        id: uuid.UUID,
        input: CategoryInput,
    ) -> CategoryType:
        payload = validate_payload(CategoryUpdate, input_to_dict(input))
        row = category_service.update_category(info.context.session, id, payload)
        return CategoryType.from_row(row)

    @strawberry.mutation
    def delete_category(self, info: Info, id: uuid.UUID) -> CategoryType:
        return CategoryType.from_row(category_service.delete_category(info.context.session, id))

    # ---- Orders ----

    @strawberry.mutation
    def add_order(self, info: Info, input: OrderInput) -> OrderType:
        payload = validate_payload(OrderCreate, input_to_dict(input))
        order = order_service.place_order(info.context.session, info.context.user, payload)
        return OrderType.from_row(order)

    @strawberry.mutation
    def update_order(
        self,
        info: Info,
        id: uuid.UUID,
        status: OrderStatusEnum,
    ) -> OrderType:
        payload = OrderStatusUpdate(status=status)
        row = order_service.update_status(info.context.session, id, payload)
        return OrderType.from_row(row)

    # ---- Users ----

    @strawberry.mutation
    def complete_sign_up(
        self,
        info: Info,
        name: str,
        phone_number: str,
        address: str,
    ) -> UserType:
        payload = validate_payload(
            CompleteSignUp,
            {"name": name, "phone_number": phone_number, "address": address},
        )
        row = user_service.complete_sign_up(info.context.session, info.context.user, payload)
        return UserType.from_row(row)

    @strawberry.mutation
    def update_customer_profile(
        self,
        info: Info,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
        address: Optional[str] = None,
    ) -> UserType:
        data = {"name": name, "phone_number": phone_number, "address": address}
        payload = validate_payload(UserUpdate, {k: v for k, v in data.items() if v is not None})
        row = user_service.update_profile(info.context.session, info.context.user, payload)
        return UserType.from_row(row)

    @strawberry.mutation
    def delete_customer_profile(
        self,
        info: Info,
        user_id: Optional[uuid.UUID] = None,
    ) -> UserType:
        deleted = user_service.delete_profile(
            info.context.session, info.context.user, user_id
        )
        return UserType.from_row(deleted)
