# app/repositories/user_repo.py
from __future__ import annotations

import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.models.user import Role, User
from app.repositories.query_utils import (
    apply_date_window,
    apply_paging,
    apply_sort,
    LIKE_ESCAPE,
    like_pattern,
)
from app.schemas.user import UserFilter

SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "createdAt": User.created_at,
}


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (queries + session bookkeeping)
      - No FastAPI, no HTTP, no business logic, no commits
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def _filtered(self, stmt, filters: UserFilter | None):
        if filters is None:
            return stmt
        if filters.search_query:
            pattern = like_pattern(filters.search_query)
            stmt = stmt.where(
                or_(
                    col(User.name).ilike(pattern, escape=LIKE_ESCAPE),
                    col(User.email).ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if filters.role is not None:
            stmt = stmt.where(User.role == filters.role)
        return apply_date_window(stmt, User.created_at, filters)

    def list(self, session: Session, filters: UserFilter | None = None) -> list[User]:
        """
        Filtered, sorted, paginated user listing.
        Newest accounts first unless a sort is requested.
        """
        stmt = self._filtered(select(User), filters)
        if filters is not None:
            stmt = apply_sort(stmt, SORT_COLUMNS, filters, col(User.created_at).desc())
            stmt = apply_paging(stmt, filters)
        else:
            stmt = stmt.order_by(col(User.created_at).desc())
        return list(session.exec(stmt).all())

    def count(self, session: Session, filters: UserFilter | None = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(User), filters)
        return int(session.exec(stmt).one() or 0)

    def count_by_role(self, session: Session, role: Role) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == role)
        return int(session.exec(stmt).one() or 0)

    def add(self, session: Session, user: User) -> User:
        session.add(user)
        return user

    def delete(self, session: Session, user: User) -> None:
        session.delete(user)
