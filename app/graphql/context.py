# app/graphql/context.py
import threading

from fastapi import Depends
from sqlmodel import Session
from strawberry.fastapi import BaseContext

from app.core.auth import get_current_user
from app.core.identity import IdentityProvider
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.services.category_service import CategoryService
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.user_service import UserService

product_repo = ProductRepository()
category_repo = CategoryRepository()
order_repo = OrderRepository()
user_repo = UserRepository()

product_service = ProductService(product_repo)
category_service = CategoryService(category_repo)
order_service = OrderService(order_repo, product_repo)
user_service = UserService(user_repo, CartRepository(), IdentityProvider())


class GraphQLContext(BaseContext):
    """Per-request context: DB session + current user (None for guests)."""

    def __init__(self, session: Session, user: User | None):
        super().__init__()
        self.session = session
        self.user = user
        # Sessions are not thread-safe; resolvers take turns on this one
        self.session_lock = threading.Lock()


def get_context(
    session: Session = Depends(get_session),
    user: User | None = Depends(get_current_user),
) -> GraphQLContext:
    return GraphQLContext(session=session, user=user)
