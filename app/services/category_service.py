# app/services/category_service.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import NotFoundError, commit_or_translate
from app.models.category import Category
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import (
    CategoryCreate,
    CategoryFilter,
    CategoryRead,
    CategoryUpdate,
)
from app.schemas.filters import HeadParams


class CategoryService:
    """
    Business logic for categories.

    - Names are unique (duplicate -> CATEGORY_ALREADY_EXISTS).
    - A category still referenced by products cannot be deleted
      (CATEGORY_IN_USE).
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    def list_categories(
        self,
        session: Session,
        filters: CategoryFilter | None = None,
    ) -> list[Category]:
        return self.repo.list(session, filters)

    def featured_categories(self, session: Session, params: HeadParams) -> list[Category]:
        return self.repo.newest(session, params.head)

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return self.repo.get_by_id(session, category_id)

    def count_categories(
        self,
        session: Session,
        filters: CategoryFilter | None = None,
    ) -> int:
        return self.repo.count(session, filters)

    def _require(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if category is None:
            raise NotFoundError("category")
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        category = Category(name=payload.name)
        self.repo.add(session, category)
        commit_or_translate(session, entity="category", action="create")
        session.refresh(category)
        return category

    def update_category(
        self,
        session: Session,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> Category:
        category = self._require(session, category_id)
        category.name = payload.name
        category.updated_at = datetime.now(timezone.utc)
        self.repo.add(session, category)
        commit_or_translate(session, entity="category", action="update")
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category_id: uuid.UUID) -> CategoryRead:
        category = self._require(session, category_id)
        deleted = CategoryRead.model_validate(category)
        self.repo.delete(session, category)
        commit_or_translate(session, entity="category", action="delete")
        return deleted
