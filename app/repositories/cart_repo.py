# app/repositories/cart_repo.py
import uuid

from sqlmodel import Session, select

from app.models.cart import CART_STORAGE_KEY, CartSnapshot


class CartRepository:
    """
    Data access for the durable cart snapshot (one JSON row per owner/key).
    """

    def get_snapshot(
        self,
        session: Session,
        owner_id: uuid.UUID,
        key: str = CART_STORAGE_KEY,
    ) -> CartSnapshot | None:
        stmt = select(CartSnapshot).where(
            CartSnapshot.owner_id == owner_id, CartSnapshot.key == key
        )
        return session.exec(stmt).first()

    def save_snapshot(
        self,
        session: Session,
        owner_id: uuid.UUID,
        items: list[dict],
        key: str = CART_STORAGE_KEY,
    ) -> CartSnapshot:
        row = self.get_snapshot(session, owner_id, key)
        if row is None:
            row = CartSnapshot(owner_id=owner_id, key=key, items=items)
        else:
            # Reassign (not mutate) so the JSON column is flagged dirty
            row.items = items
        session.add(row)
        return row

    def delete_snapshot(
        self,
        session: Session,
        owner_id: uuid.UUID,
        key: str = CART_STORAGE_KEY,
    ) -> None:
        row = self.get_snapshot(session, owner_id, key)
        if row is not None:
            session.delete(row)

    def delete_for_owner(self, session: Session, owner_id: uuid.UUID) -> None:
        stmt = select(CartSnapshot).where(CartSnapshot.owner_id == owner_id)
        for row in session.exec(stmt).all():
            session.delete(row)
