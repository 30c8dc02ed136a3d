# app/repositories/order_repo.py
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from app.models.order import Order, OrderItem, OrderStatus
from app.models.user import User
from app.repositories.query_utils import (
    apply_date_window,
    apply_paging,
    apply_sort,
    LIKE_ESCAPE,
    like_pattern,
)
from app.schemas.order import OrderFilter

SORT_COLUMNS = {
    "id": Order.id,
    "total": Order.total,
    "status": Order.status,
    "createdAt": Order.created_at,
    "user.name": User.name,
}

# Orders that still need work from the shop
INACTIVE_STATUSES = (
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.RETURNED,
    OrderStatus.COMPLETED,
)


def _as_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def _filtered(self, stmt, filters: OrderFilter | None):
        # Always joined so search / sort can use the customer's columns
        stmt = stmt.join(User, col(User.id) == col(Order.user_id))
        if filters is None:
            return stmt

        if filters.search_query:
            pattern = like_pattern(filters.search_query)
            clauses = [
                col(User.name).ilike(pattern, escape=LIKE_ESCAPE),
                col(User.email).ilike(pattern, escape=LIKE_ESCAPE),
            ]
            order_id = _as_uuid(filters.search_query)
            if order_id is not None:
                clauses.append(Order.id == order_id)
            stmt = stmt.where(or_(*clauses))

        if filters.status is not None:
            stmt = stmt.where(Order.status == filters.status)

        return apply_date_window(stmt, Order.created_at, filters)

    def list(
        self,
        session: Session,
        filters: OrderFilter | None = None,
    ) -> list[Order]:
        stmt = self._filtered(select(Order), filters)
        if filters is not None:
            stmt = apply_sort(stmt, SORT_COLUMNS, filters, col(Order.created_at).desc())
            stmt = apply_paging(stmt, filters)
        else:
            stmt = stmt.order_by(col(Order.created_at).desc())
        return list(session.exec(stmt).all())

    def count(self, session: Session, filters: OrderFilter | None = None) -> int:
        stmt = self._filtered(select(func.count(Order.id)).select_from(Order), filters)
        return int(session.exec(stmt).one() or 0)

    def count_all(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        return int(session.exec(stmt).one() or 0)

    def count_active(self, session: Session) -> int:
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(col(Order.status).not_in(INACTIVE_STATUSES))
        )
        return int(session.exec(stmt).one() or 0)

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(col(Order.created_at).desc())
        )
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def set_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        current: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        """
        Move an order from `current` to `new` status.

        UPDATE orders SET status = :new, updated_at = :now
        WHERE id = :id AND status = :current

        Returns:
            False if the order was no longer in `current` (nothing updated).
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == current)
            .values(status=new, updated_at=updated_at)
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure the row exists
        before items reference it.
        """
        session.add(order)
        session.flush()
        return order

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(col(OrderItem.created_at))
        )
        return list(session.exec(stmt).all())

    def get_item(self, session: Session, item_id: uuid.UUID) -> OrderItem | None:
        return session.get(OrderItem, item_id)

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
