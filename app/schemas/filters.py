# app/schemas/filters.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

SortDirection = Literal["asc", "desc"]

SEARCH_QUERY_MAX_LENGTH = 100


def blank_to_none(v):
    """Form widgets send "" for "no filter"; treat it as absent."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PageParams(SQLModel):
    """
    Shared sorting / paging / date-window fields for list filters.

    Paging is either page based (limit + current_page) or offset based
    (limit + offset). Without a limit the whole result set is returned.
    """

    model_config = ConfigDict(extra="forbid")

    search_query: str | None = Field(default=None, max_length=SEARCH_QUERY_MAX_LENGTH)
    start_date: datetime | None = None
    end_date: datetime | None = None

    sort_by: str | None = None
    sort_direction: SortDirection | None = None

    limit: int | None = Field(default=None, ge=5, le=50)
    current_page: int | None = Field(default=None, ge=1)
    offset: int | None = Field(default=None, ge=0)

    @field_validator(
        "search_query",
        "start_date",
        "end_date",
        "sort_by",
        "sort_direction",
        mode="before",
    )
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)

    @field_validator("search_query")
    @classmethod
    def strip_search(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def check_date_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    @property
    def skip(self) -> int:
        if self.offset is not None:
            return self.offset
        if self.limit and self.current_page:
            return (self.current_page - 1) * self.limit
        return 0


class HeadParams(SQLModel):
    """Size of a "featured" selection (newest N rows)."""

    model_config = ConfigDict(extra="forbid")

    head: int = Field(ge=1, le=100)
