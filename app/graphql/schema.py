# app/graphql/schema.py
import strawberry
from strawberry.fastapi import GraphQLRouter

from app.core.config import get_settings
from app.graphql.context import get_context
from app.graphql.extensions import AccessGate
from app.graphql.mutations import Mutation
from app.graphql.queries import Query

settings = get_settings()

schema = strawberry.Schema(query=Query, mutation=Mutation, extensions=[AccessGate])

graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.GRAPHQL_IDE else None,
)
