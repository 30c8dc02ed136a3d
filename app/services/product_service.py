# app/services/product_service.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import NotFoundError, commit_or_translate
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.filters import HeadParams
from app.schemas.product import (
    ProductCreate,
    ProductFilter,
    ProductRead,
    ProductUpdate,
)


class ProductService:
    """
    Business logic for the product catalog.

    Reads are public and never raise for a missing product (get_product
    returns None). Writes are admin-only (enforced by the access policy)
    and map storage failures to domain errors.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Reads -----

    def list_products(
        self,
        session: Session,
        filters: ProductFilter | None = None,
    ) -> list[Product]:
        return self.repo.list(session, filters)

    def featured_products(self, session: Session, params: HeadParams) -> list[Product]:
        return self.repo.newest(session, params.head)

    def products_in_category(
        self,
        session: Session,
        category_id: uuid.UUID,
    ) -> list[Product]:
        return self.repo.list_by_category(session, category_id)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return self.repo.get_by_id(session, product_id)

    def count_products(
        self,
        session: Session,
        filters: ProductFilter | None = None,
    ) -> int:
        return self.repo.count(session, filters)

    def count_available_products(self, session: Session) -> int:
        return self.repo.count_available(session)

    # ----- Admin writes -----

    def _require(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if product is None:
            raise NotFoundError("product")
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            qte_in_stock=payload.qte_in_stock,
            category_id=payload.category_id,
        )
        self.repo.add(session, product)
        commit_or_translate(session, entity="product", action="create")
        session.refresh(product)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update; only fields present in the payload are touched.
        description / category_id sent as null are cleared.
        """
        product = self._require(session, product_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        product.updated_at = datetime.now(timezone.utc)
        self.repo.add(session, product)
        commit_or_translate(session, entity="product", action="update")
        session.refresh(product)
        return product

    def delete_product(self, session: Session, product_id: uuid.UUID) -> ProductRead:
        """
        Delete a product and return the deleted row.

        Raises:
            NotFoundError: PRODUCT_NOT_FOUND
            InUseError: PRODUCT_IN_USE when order items still reference it.
        """
        product = self._require(session, product_id)
        # Attributes expire on commit; keep a detached copy to return
        deleted = ProductRead.model_validate(product)
        self.repo.delete(session, product)
        commit_or_translate(session, entity="product", action="delete")
        return deleted
