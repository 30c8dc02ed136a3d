# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import requires
from app.core.errors import NotFoundError, validate_payload
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartSummary
from app.schemas.order import OrderCreate, OrderWithItemsRead
from app.services.cart_store import CartStore, DatabaseCartBackend
from app.services.order_service import OrderService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
order_service = OrderService(OrderRepository(), product_repo)


def _store(session: Session, user: User) -> CartStore:
    return CartStore(DatabaseCartBackend(session, user.id, cart_repo))


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("cart")),
):
    """
    Get current customer's cart summary.

    Auth:
      - Only role=CUSTOMER can access.
    """
    return _store(session, current_user).summary()


@router.post("/items/{product_id}", response_model=CartSummary)
def add_to_cart(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("cart")),
):
    """
    Add one unit of a product to the cart.

    Returns the updated cart summary; 409 INSUFFICIENT_STOCK once the line
    reaches the product's stock.
    """
    product = product_repo.get_by_id(session, product_id)
    if product is None:
        raise NotFoundError("product")
    store = _store(session, current_user)
    store.add_to_cart(product)
    return store.summary()


@router.delete("/items/{product_id}", response_model=CartSummary)
def remove_from_cart(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("cart")),
):
    """
    Remove one unit of a product; the line disappears at zero.
    Unknown products are a no-op.
    """
    store = _store(session, current_user)
    store.remove_from_cart(product_id)
    return store.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("cart")),
):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    store = _store(session, current_user)
    store.clear_cart()
    return store.summary()


@router.post("/checkout", response_model=OrderWithItemsRead, status_code=201)
def checkout(
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("checkout")),
):
    """
    Submit the cart as an order, then clear it.

    The order service re-checks prices and stock; on any failure the cart
    is left untouched.
    """
    store = _store(session, current_user)
    payload = validate_payload(
        OrderCreate,
        {
            "items": [item.model_dump() for item in store.to_order_items()],
            "total": store.total(),
        },
    )
    order = order_service.place_order(session, current_user, payload)
    store.clear_cart()
    return order
