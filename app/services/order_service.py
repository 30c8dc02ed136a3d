# app/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.access import authorize
from app.core.errors import (
    ConcurrentUpdateError,
    InsufficientStockError,
    NotFoundError,
    ValidationFailedError,
    commit_or_translate,
    translate_db_error,
)
from app.models.order import Order, OrderItem, OrderStatus
from app.models.product import Product
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    OrderCreate,
    OrderFilter,
    OrderItemRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)

logger = logging.getLogger(__name__)

# Claimed totals may differ from the recomputed one by rounding only
TOTAL_TOLERANCE = 0.005


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate submitted items against the catalog
      - Recompute the total from authoritative prices
      - Create Order + OrderItems and take stock in one transaction
      - Status updates (admin), restocking on cancellation
      - Owner-or-admin checks once an order is loaded
    """

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo

    # -------- Customer operations --------

    def place_order(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Submit an order for the current customer.

        Steps:
          1. Load every product (PRODUCT_NOT_FOUND if one is missing).
          2. Recompute sum(price * qte); reject a mismatching claimed total.
          3. Create Order row (status=PENDING).
          4. Create OrderItem rows with the unit price snapshot.
          5. Take stock with a conditional decrement per line; any line
             short on stock aborts the whole order.
          6. Commit.
        """
        # 1) Load products
        products: dict[uuid.UUID, Product] = {}
        for line in payload.items:
            product = self.product_repo.get_by_id(session, line.product_id)
            if product is None:
                raise NotFoundError("product")
            products[line.product_id] = product

        # 2) Server-side total
        computed = round(
            sum(products[line.product_id].price * line.qte for line in payload.items),
            2,
        )
        if abs(computed - payload.total) > TOTAL_TOLERANCE:
            raise ValidationFailedError.for_field(
                "total",
                f"Total does not match the sum of item prices (expected {computed:.2f})",
            )

        try:
            # 3) Order
            order = self.order_repo.create_order(
                session,
                Order(user_id=user.id, status=OrderStatus.PENDING, total=computed),
            )

            # 4) Items
            items = self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product_id,
                        qte=line.qte,
                        unit_price=products[line.product_id].price,
                    )
                    for line in payload.items
                ],
            )

            # 5) Stock
            for line in payload.items:
                if not self.product_repo.decrement_stock(session, line.product_id, line.qte):
                    raise InsufficientStockError(
                        f"Insufficient stock for '{products[line.product_id].name}'"
                    )

            # 6) Commit
            result = self._build_order_with_items_dto(order, items)
            session.commit()
        except InsufficientStockError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise translate_db_error(exc, entity="order", action="create") from exc

        logger.info("Order %s placed by %s (total=%.2f)", result.id, user.id, result.total)
        return result

    def my_orders(self, session: Session, user: User) -> list[Order]:
        return self.order_repo.list_for_user(session, user.id)

    # -------- Owner-or-admin reads --------

    def get_order(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
        operation: str = "order",
    ) -> Order:
        """
        Load an order the caller is entitled to see.

        Raises:
            NotFoundError: ORDER_NOT_FOUND
            AccessDeniedError: caller is neither the owner nor an admin.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("order")
        authorize(operation, user, owner_id=order.user_id)
        return order

    def list_items(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        order = self.get_order(session, user, order_id, operation="orderItems")
        return self.order_repo.list_items_for_order(session, order.id)

    def get_item(
        self,
        session: Session,
        user: User,
        item_id: uuid.UUID,
    ) -> OrderItem | None:
        item = self.order_repo.get_item(session, item_id)
        if item is None:
            return None
        self.get_order(session, user, item.order_id, operation="orderItem")
        return item

    # -------- Admin operations --------

    def list_orders(
        self,
        session: Session,
        filters: OrderFilter | None = None,
    ) -> list[Order]:
        return self.order_repo.list(session, filters)

    def count_filtered_orders(
        self,
        session: Session,
        filters: OrderFilter | None = None,
    ) -> int:
        return self.order_repo.count(session, filters)

    def count_orders(self, session: Session) -> int:
        return self.order_repo.count_all(session)

    def count_active_orders(self, session: Session) -> int:
        return self.order_repo.count_active(session)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> Order:
        """
        Admin-only status update. Any status may follow any other.

        - Same status => no-op.
        - Moving to CANCELLED puts the ordered units back in stock.
        - Leaving CANCELLED takes them out again (InsufficientStock if gone).
        - The status only changes if nobody else changed it since it was
          read; otherwise ConcurrentUpdate and stock is left alone.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("order")

        current = order.status
        new = payload.status

        if current == new:
            return order

        try:
            moved = self.order_repo.set_status(
                session, order.id, current, new, datetime.now(timezone.utc)
            )
            if not moved:
                session.rollback()
                raise ConcurrentUpdateError()

            if new == OrderStatus.CANCELLED:
                for item in self.order_repo.list_items_for_order(session, order.id):
                    self.product_repo.restock(session, item.product_id, item.qte)
            elif current == OrderStatus.CANCELLED:
                for item in self.order_repo.list_items_for_order(session, order.id):
                    if not self.product_repo.decrement_stock(
                        session, item.product_id, item.qte
                    ):
                        session.rollback()
                        raise InsufficientStockError()
        except SQLAlchemyError as exc:
            session.rollback()
            raise translate_db_error(exc, entity="order", action="update") from exc

        commit_or_translate(session, entity="order", action="update")
        logger.info("Order %s moved from %s to %s", order.id, current.value, new.value)
        session.refresh(order)
        return order

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[item_to_read(it) for it in items],
        )


def item_to_read(item: OrderItem) -> OrderItemRead:
    return OrderItemRead(
        id=item.id,
        order_id=item.order_id,
        product_id=item.product_id,
        qte=item.qte,
        unit_price=item.unit_price,
        line_total=round(item.qte * item.unit_price, 2),
    )
