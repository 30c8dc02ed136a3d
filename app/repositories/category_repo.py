# app/repositories/category_repo.py
from __future__ import annotations

import uuid

from sqlalchemy import func
from sqlmodel import Session, col, select

from app.models.category import Category
from app.repositories.query_utils import (
    apply_date_window,
    apply_paging,
    apply_sort,
    LIKE_ESCAPE,
    like_pattern,
)
from app.schemas.category import CategoryFilter

SORT_COLUMNS = {
    "id": Category.id,
    "name": Category.name,
    "createdAt": Category.created_at,
}


class CategoryRepository:
    """
    Data access layer for Category. Default ordering is newest first.
    """

    def get_by_id(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    def _filtered(self, stmt, filters: CategoryFilter | None):
        if filters is None:
            return stmt
        if filters.search_query:
            stmt = stmt.where(col(Category.name).ilike(
                like_pattern(filters.search_query), escape=LIKE_ESCAPE
            ))
        return apply_date_window(stmt, Category.created_at, filters)

    def list(
        self,
        session: Session,
        filters: CategoryFilter | None = None,
    ) -> list[Category]:
        stmt = self._filtered(select(Category), filters)
        if filters is not None:
            stmt = apply_sort(stmt, SORT_COLUMNS, filters, col(Category.created_at).desc())
            stmt = apply_paging(stmt, filters)
        else:
            stmt = stmt.order_by(col(Category.created_at).desc())
        return list(session.exec(stmt).all())

    def newest(self, session: Session, head: int) -> list[Category]:
        stmt = select(Category).order_by(col(Category.created_at).desc()).limit(head)
        return list(session.exec(stmt).all())

    def count(self, session: Session, filters: CategoryFilter | None = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(Category), filters)
        return int(session.exec(stmt).one() or 0)

    def add(self, session: Session, category: Category) -> Category:
        session.add(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
