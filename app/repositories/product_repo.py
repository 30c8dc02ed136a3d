# app/repositories/product_repo.py
from __future__ import annotations

import uuid

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from app.models.product import Product
from app.repositories.query_utils import (
    apply_date_window,
    apply_paging,
    apply_sort,
    LIKE_ESCAPE,
    like_pattern,
)
from app.schemas.product import LOW_STOCK_THRESHOLD, ProductFilter

SORT_COLUMNS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.qte_in_stock,
    "createdAt": Product.created_at,
}


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations; no commits, no business logic.
    - Services own the transaction.
    """

    # ----- Reads -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def _filtered(self, stmt, filters: ProductFilter | None):
        if filters is None:
            return stmt

        if filters.search_query:
            pattern = like_pattern(filters.search_query)
            stmt = stmt.where(
                or_(
                    col(Product.name).ilike(pattern, escape=LIKE_ESCAPE),
                    col(Product.description).ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if filters.stock == "In Stock":
            stmt = stmt.where(Product.qte_in_stock > LOW_STOCK_THRESHOLD)
        elif filters.stock == "Low Stock":
            stmt = stmt.where(
                Product.qte_in_stock >= 1,
                Product.qte_in_stock <= LOW_STOCK_THRESHOLD,
            )
        elif filters.stock == "Out Stock":
            stmt = stmt.where(Product.qte_in_stock == 0)

        if filters.min_price is not None:
            stmt = stmt.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Product.price <= filters.max_price)
        if filters.category_id is not None:
            stmt = stmt.where(Product.category_id == filters.category_id)

        return apply_date_window(stmt, Product.created_at, filters)

    def list(
        self,
        session: Session,
        filters: ProductFilter | None = None,
    ) -> list[Product]:
        stmt = self._filtered(select(Product), filters)
        if filters is not None:
            stmt = apply_sort(stmt, SORT_COLUMNS, filters, col(Product.created_at).desc())
            stmt = apply_paging(stmt, filters)
        else:
            stmt = stmt.order_by(col(Product.created_at).desc())
        return list(session.exec(stmt).all())

    def list_by_category(self, session: Session, category_id: uuid.UUID) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.category_id == category_id)
            .order_by(col(Product.created_at).desc())
        )
        return list(session.exec(stmt).all())

    def newest(self, session: Session, head: int) -> list[Product]:
        stmt = select(Product).order_by(col(Product.created_at).desc()).limit(head)
        return list(session.exec(stmt).all())

    def count(self, session: Session, filters: ProductFilter | None = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(Product), filters)
        return int(session.exec(stmt).one() or 0)

    def count_available(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Product).where(Product.qte_in_stock > 0)
        return int(session.exec(stmt).one() or 0)

    # ----- Writes -----

    def add(self, session: Session, product: Product) -> Product:
        session.add(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)

    def decrement_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        qte: int,
    ) -> bool:
        """
        Atomically take `qte` units out of stock.

        UPDATE products SET qte_in_stock = qte_in_stock - :qte
        WHERE id = :id AND qte_in_stock >= :qte

        Returns:
            False if the row did not have enough stock (nothing updated).
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.qte_in_stock >= qte)
            .values(qte_in_stock=Product.qte_in_stock - qte)
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    def restock(self, session: Session, product_id: uuid.UUID, qte: int) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(qte_in_stock=Product.qte_in_stock + qte)
        )
        session.execute(stmt)
