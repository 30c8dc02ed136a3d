# app/graphql/extensions.py
from fastapi.concurrency import run_in_threadpool
from graphql import GraphQLObjectType, get_named_type
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from strawberry.extensions import SchemaExtension

from app.core.access import authorize
from app.core.errors import ValidationFailedError, translate_db_error


def _touches_database(info, is_root: bool) -> bool:
    # Root fields call services; object-typed fields load relations
    if is_root:
        return True
    return isinstance(get_named_type(info.return_type), GraphQLObjectType)


class AccessGate(SchemaExtension):
    """
    Runs the access policy for every root Query / Mutation field before its
    resolver, and maps leftover validation / storage errors to the domain
    taxonomy so every GraphQL error carries `extensions.code`.

    Resolvers are plain functions doing blocking SQLAlchemy I/O. Fields that
    reach the database run in the threadpool, one at a time per request
    since they share the request's session; scalar fields resolve inline.
    """

    def resolve(self, _next, root, info, *args, **kwargs):
        schema = info.schema
        is_root = info.parent_type in (schema.query_type, schema.mutation_type)
        if info.field_name.startswith("__"):
            return _next(root, info, *args, **kwargs)
        if is_root:
            authorize(info.field_name, info.context.user)

        if _touches_database(info, is_root):
            return self._resolve_in_threadpool(_next, root, info, *args, **kwargs)
        return _next(root, info, *args, **kwargs)

    async def _resolve_in_threadpool(self, _next, root, info, *args, **kwargs):
        return await run_in_threadpool(self._resolve_locked, _next, root, info, *args, **kwargs)

    def _resolve_locked(self, _next, root, info, *args, **kwargs):
        with info.context.session_lock:
            try:
                return _next(root, info, *args, **kwargs)
            except ValidationError as exc:
                raise ValidationFailedError.from_pydantic(exc) from exc
            except SQLAlchemyError as exc:
                info.context.session.rollback()
                action = "read" if info.operation.operation.value == "query" else "write"
                raise translate_db_error(exc, action=action) from exc
