# app/core/errors.py
"""
Domain error taxonomy shared by the GraphQL resolvers and REST routers.

Every error carries:
  - code        : stable machine-readable identifier (GraphQL extensions.code)
  - message     : human-readable text, safe to show to the caller
  - status_code : HTTP status used by the REST exception handler

Storage failures are never surfaced raw. `translate_db_error` maps the
underlying driver error code to one of the kinds below through a single
lookup table; unknown codes become DatabaseOperationFailedError and the raw
error is logged server-side.
"""
import logging
import sqlite3
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlmodel import Session

logger = logging.getLogger(__name__)


class AppError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    @property
    def extensions(self) -> dict[str, Any]:
        # graphql-core copies `extensions` from the original error
        return {"code": self.code}


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    message = "Unauthorized"


class AccessDeniedError(AppError):
    code = "ACCESS_DENIED"
    status_code = 403
    message = "Access denied"


class ValidationFailedError(AppError):
    code = "VALIDATION_FAILED"
    status_code = 400
    message = "Validation failed"

    def __init__(
        self,
        errors: list[dict[str, str]] | None = None,
        message: str | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailedError":
        return cls([{"field": field, "message": message}])

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailedError":
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"]) or "__root__"
            errors.append({"field": field, "message": err["msg"]})
        return cls(errors)

    @property
    def extensions(self) -> dict[str, Any]:
        return {"code": self.code, "errors": self.errors}


def _label(entity: str) -> str:
    return entity.replace("_", " ").capitalize()


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    message = "Record not found"

    def __init__(self, entity: str = "record"):
        super().__init__(
            f"{_label(entity)} not found",
            code=f"{entity.upper()}_NOT_FOUND" if entity != "record" else None,
        )


class AlreadyExistsError(AppError):
    code = "ALREADY_EXISTS"
    status_code = 409

    def __init__(self, entity: str = "record"):
        super().__init__(
            f"{_label(entity)} already exists",
            code=f"{entity.upper()}_ALREADY_EXISTS",
        )


class InUseError(AppError):
    code = "IN_USE"
    status_code = 409

    def __init__(self, entity: str = "record"):
        super().__init__(
            f"Cannot delete {_label(entity).lower()}: it is still referenced",
            code=f"{entity.upper()}_IN_USE",
        )


class InvalidReferenceError(AppError):
    code = "INVALID_DATA_REFERENCE"
    status_code = 400
    message = "Invalid data reference"


class InsufficientStockError(AppError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409
    message = "Insufficient stock"


class ConcurrentUpdateError(AppError):
    """The row changed between being read and being written."""

    code = "CONCURRENT_UPDATE"
    status_code = 409
    message = "The record was modified by another request; reload and retry"


class TemporarilyUnavailableError(AppError):
    code = "DATABASE_TEMPORARILY_UNAVAILABLE"
    status_code = 503
    message = "Database temporarily unavailable"


class DatabaseOperationFailedError(AppError):
    code = "DATABASE_OPERATION_FAILED"
    status_code = 500
    message = "Database operation failed"


class UpstreamServiceError(AppError):
    """Supabase Storage / Auth admin call failed."""

    code = "UPSTREAM_SERVICE_FAILED"
    status_code = 502
    message = "External service request failed"


# ---------------------------------------------------------------------------
# Storage error code -> domain error kind
#
# Keys are PostgreSQL SQLSTATE codes and SQLite extended result names.
# ---------------------------------------------------------------------------

UNIQUE_VIOLATION = "unique"
FOREIGN_KEY_VIOLATION = "foreign_key"
VALUE_TOO_LONG = "too_long"

DB_ERROR_KINDS: dict[str, str] = {
    "23505": UNIQUE_VIOLATION,
    "23503": FOREIGN_KEY_VIOLATION,
    "22001": VALUE_TOO_LONG,
    "SQLITE_CONSTRAINT_UNIQUE": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": FOREIGN_KEY_VIOLATION,
}

_SQLITE_CONSTRAINT_PREFIXES = {
    "UNIQUE": "SQLITE_CONSTRAINT_UNIQUE",
    "FOREIGN KEY": "SQLITE_CONSTRAINT_FOREIGNKEY",
}


def _storage_error_code(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code

    if isinstance(orig, sqlite3.Error):
        name = getattr(orig, "sqlite_errorname", None)
        if name and name != "SQLITE_CONSTRAINT":
            return name
        # Older interpreters only report the primary code; the constraint
        # kind is the message prefix ("UNIQUE constraint failed: ...").
        prefix = str(orig).split(" constraint failed", 1)[0]
        return _SQLITE_CONSTRAINT_PREFIXES.get(prefix, name)

    return None


def translate_db_error(
    exc: SQLAlchemyError,
    *,
    entity: str = "record",
    action: str = "write",
) -> AppError:
    """
    Map a SQLAlchemy error to the domain taxonomy.

    Args:
        exc: the error raised by the session / engine.
        entity: entity name used for specific codes (e.g. "category").
        action: "create" | "update" | "delete" | "read" | "write".
            A foreign-key violation means "still referenced" on delete and
            "points at nothing" everywhere else.
    """
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError)):
        logger.warning("Database unavailable during %s %s: %s", action, entity, exc)
        return TemporarilyUnavailableError()

    kind = None
    if isinstance(exc, DBAPIError):
        kind = DB_ERROR_KINDS.get(_storage_error_code(exc) or "")

    if kind == UNIQUE_VIOLATION:
        return AlreadyExistsError(entity)
    if kind == FOREIGN_KEY_VIOLATION:
        if action == "delete":
            return InUseError(entity)
        return InvalidReferenceError()
    if kind == VALUE_TOO_LONG:
        return ValidationFailedError(message="Input value is too long")

    if isinstance(exc, IntegrityError):
        logger.exception("Unmapped integrity error during %s %s", action, entity)
    else:
        logger.exception("Database error during %s %s", action, entity)
    return DatabaseOperationFailedError()


def commit_or_translate(
    session: Session,
    *,
    entity: str = "record",
    action: str = "write",
) -> None:
    """
    Commit the session; on failure roll back and raise the mapped domain error.
    """
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise translate_db_error(exc, entity=entity, action=action) from exc


def validate_payload(model, data: dict[str, Any]):
    """
    Build a pydantic / SQLModel input model, re-raising validation problems
    as ValidationFailedError (field -> message pairs).
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailedError.from_pydantic(exc) from exc


def flush_or_translate(
    session: Session,
    *,
    entity: str = "record",
    action: str = "write",
) -> None:
    """
    Flush pending changes without committing, so constraint errors surface
    before work outside the database starts. Rolls back on failure.
    """
    try:
        session.flush()
    except SQLAlchemyError as exc:
        session.rollback()
        raise translate_db_error(exc, entity=entity, action=action) from exc
