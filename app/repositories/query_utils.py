# app/repositories/query_utils.py
from typing import Any

from sqlalchemy import asc, desc

from app.schemas.filters import PageParams


def apply_date_window(stmt, column, params: PageParams):
    """Restrict `column` to [start_date, end_date] when given."""
    if params.start_date is not None:
        stmt = stmt.where(column >= params.start_date)
    if params.end_date is not None:
        stmt = stmt.where(column <= params.end_date)
    return stmt


def apply_sort(stmt, columns: dict[str, Any], params: PageParams, default):
    """
    Order by the requested column, falling back to `default` (a column
    expression, e.g. Model.created_at.desc()).
    """
    column = columns.get(params.sort_by) if params.sort_by else None
    if column is None:
        return stmt.order_by(default)
    direction = desc if params.sort_direction == "desc" else asc
    return stmt.order_by(direction(column))


def apply_paging(stmt, params: PageParams):
    if params.skip:
        stmt = stmt.offset(params.skip)
    if params.limit:
        stmt = stmt.limit(params.limit)
    return stmt


LIKE_ESCAPE = "\\"


def like_pattern(term: str) -> str:
    """Substring pattern for ILIKE; wildcards in `term` match literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
