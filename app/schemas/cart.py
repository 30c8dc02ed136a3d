# app/schemas/cart.py
import uuid

from sqlmodel import SQLModel, Field


class CartLineItem(SQLModel):
    """
    One product + quantity pairing held in a cart.

    name / price / qte_in_stock are snapshots taken when the product was
    last added; the order service re-reads the catalog at checkout.
    """

    product_id: uuid.UUID
    name: str
    price: float = Field(ge=0)
    qte_in_stock: int | None = None
    qte: int = Field(ge=1)


class CartLineRead(CartLineItem):
    line_total: float


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total_quantity: int
    total_price: float
