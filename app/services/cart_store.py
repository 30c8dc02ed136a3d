# app/services/cart_store.py
"""
Cart store: the customer's collection of line items plus its durable
snapshot.

The store is constructed explicitly with a persistence backend; every
mutation writes the whole collection back, so the snapshot never drifts
from what `get_cart()` returns.
"""
import copy
import uuid
from typing import Any, Protocol

from sqlmodel import Session

from app.core.errors import InsufficientStockError, commit_or_translate
from app.models.cart import CART_STORAGE_KEY
from app.repositories.cart_repo import CartRepository
from app.schemas.cart import CartLineItem, CartLineRead, CartSummary
from app.schemas.order import OrderItemCreate


class CartBackend(Protocol):
    def load(self) -> list[dict[str, Any]] | None: ...

    def save(self, items: list[dict[str, Any]]) -> None: ...

    def clear(self) -> None: ...


class MemoryCartBackend:
    """In-process backend; `storage` plays the role of durable storage."""

    def __init__(self, storage: dict[str, Any] | None = None, key: str = CART_STORAGE_KEY):
        self.storage = storage if storage is not None else {}
        self.key = key

    def load(self) -> list[dict[str, Any]] | None:
        items = self.storage.get(self.key)
        return copy.deepcopy(items) if items is not None else None

    def save(self, items: list[dict[str, Any]]) -> None:
        self.storage[self.key] = copy.deepcopy(items)

    def clear(self) -> None:
        self.storage.pop(self.key, None)


class DatabaseCartBackend:
    """Snapshot kept as a JSON row in cart_snapshots, one per customer."""

    def __init__(
        self,
        session: Session,
        owner_id: uuid.UUID,
        repo: CartRepository | None = None,
        key: str = CART_STORAGE_KEY,
    ):
        self.session = session
        self.owner_id = owner_id
        self.repo = repo or CartRepository()
        self.key = key

    def load(self) -> list[dict[str, Any]] | None:
        row = self.repo.get_snapshot(self.session, self.owner_id, self.key)
        return list(row.items) if row is not None else None

    def save(self, items: list[dict[str, Any]]) -> None:
        self.repo.save_snapshot(self.session, self.owner_id, items, self.key)
        commit_or_translate(self.session, entity="cart", action="write")

    def clear(self) -> None:
        self.repo.delete_snapshot(self.session, self.owner_id, self.key)
        commit_or_translate(self.session, entity="cart", action="delete")


class CartStore:
    """
    Line-item bookkeeping for one customer's cart.

    - add_to_cart: +1 on an existing line, else a new line with qte=1
    - remove_from_cart: -1, dropping the line when it would reach 0
    - a line never exceeds its known stock snapshot
    """

    def __init__(self, backend: CartBackend):
        self.backend = backend
        snapshot = backend.load()
        if snapshot is None:
            self._items: list[CartLineItem] = []
            # Seed the durable snapshot with the empty collection
            self._persist()
        else:
            self._items = [CartLineItem.model_validate(raw) for raw in snapshot]

    def _persist(self) -> None:
        self.backend.save([item.model_dump(mode="json") for item in self._items])

    def _index_of(self, product_id: uuid.UUID) -> int | None:
        for idx, item in enumerate(self._items):
            if item.product_id == product_id:
                return idx
        return None

    def get_cart(self) -> tuple[CartLineItem, ...]:
        return tuple(self._items)

    def add_to_cart(self, product) -> tuple[CartLineItem, ...]:
        """
        Add one unit of `product` (anything with id / name / price /
        qte_in_stock). Name, price and stock snapshots are refreshed.

        Raises:
            InsufficientStockError: the line would exceed the known stock.
        """
        stock = getattr(product, "qte_in_stock", None)
        idx = self._index_of(product.id)
        qte = 1 if idx is None else self._items[idx].qte + 1

        if stock is not None and qte > stock:
            raise InsufficientStockError(f"Only {stock} unit(s) of '{product.name}' in stock")

        line = CartLineItem(
            product_id=product.id,
            name=product.name,
            price=product.price,
            qte_in_stock=stock,
            qte=qte,
        )
        if idx is None:
            self._items.append(line)
        else:
            self._items[idx] = line

        self._persist()
        return self.get_cart()

    def remove_from_cart(self, product_id: uuid.UUID) -> tuple[CartLineItem, ...]:
        idx = self._index_of(product_id)
        if idx is None:
            return self.get_cart()

        item = self._items[idx]
        if item.qte > 1:
            self._items[idx] = item.model_copy(update={"qte": item.qte - 1})
        else:
            del self._items[idx]

        self._persist()
        return self.get_cart()

    def clear_cart(self) -> None:
        """Empty the cart and drop the durable snapshot (e.g. after checkout)."""
        self._items = []
        self.backend.clear()

    def total(self) -> float:
        return round(sum(item.price * item.qte for item in self._items), 2)

    def total_quantity(self) -> int:
        return sum(item.qte for item in self._items)

    def to_order_items(self) -> list[OrderItemCreate]:
        return [
            OrderItemCreate(product_id=item.product_id, qte=item.qte)
            for item in self._items
        ]

    def summary(self) -> CartSummary:
        return CartSummary(
            items=[
                CartLineRead(
                    **item.model_dump(),
                    line_total=round(item.price * item.qte, 2),
                )
                for item in self._items
            ],
            total_quantity=self.total_quantity(),
            total_price=self.total(),
        )
