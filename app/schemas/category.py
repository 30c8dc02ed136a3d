# app/schemas/category.py
import re
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.filters import PageParams

MIN_CATEGORY_NAME_LENGTH = 2
MAX_CATEGORY_NAME_LENGTH = 50

# Letters, numbers, spaces, hyphens and underscores
_CATEGORY_NAME = re.compile(r"^[\w\s\-]+$")


class CategoryCreate(SQLModel):
    """
    Payload for creating or renaming a category (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=MAX_CATEGORY_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < MIN_CATEGORY_NAME_LENGTH:
            raise ValueError(
                f"Name should be at least {MIN_CATEGORY_NAME_LENGTH} characters long"
            )
        if not _CATEGORY_NAME.match(v):
            raise ValueError(
                "Name should only contain letters, numbers, spaces, hyphens, and underscores"
            )
        return v


class CategoryUpdate(CategoryCreate):
    pass


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime | None = None


class CategoryFilter(PageParams):
    """Admin table filter: name search only."""
