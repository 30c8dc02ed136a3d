# tests/support.py
"""
Shared test fixtures. Import this module before anything from `app` so the
settings point at an in-memory SQLite database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import unittest
import uuid
from datetime import datetime, timedelta, timezone
from unittest import mock

from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.core.config import get_settings
from app.core.identity import IdentityProvider
from app.database import engine
from app.main import app
from app.models.category import Category
from app.models.product import Product
from app.models.user import Role, User

settings = get_settings()

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def reset_database() -> None:
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)


def make_token(user_id: uuid.UUID, email: str) -> str:
    claims = {"sub": str(user_id), "email": email, "aud": "authenticated"}
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}


def create_user(
    role: Role | None = Role.CUSTOMER,
    name: str = "Test Customer",
    email: str | None = None,
) -> User:
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=email or f"{user_id.hex[:8]}@shop.dz",
        name=name,
        role=role,
    )
    with Session(engine) as session:
        session.add(user)
        session.commit()
        session.refresh(user)
    return user


def create_category(name: str, minutes: int = 0) -> Category:
    category = Category(name=name, created_at=BASE_TIME + timedelta(minutes=minutes))
    with Session(engine) as session:
        session.add(category)
        session.commit()
        session.refresh(category)
    return category


def create_product(
    name: str,
    price: float = 10.0,
    qte_in_stock: int = 20,
    category_id: uuid.UUID | None = None,
    description: str | None = None,
    minutes: int = 0,
) -> Product:
    product = Product(
        name=name,
        description=description,
        price=price,
        qte_in_stock=qte_in_stock,
        category_id=category_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    with Session(engine) as session:
        session.add(product)
        session.commit()
        session.refresh(product)
    return product


def load(model, row_id):
    with Session(engine) as session:
        return session.get(model, row_id)


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema for every test."""

    def setUp(self):
        reset_database()
        self.session = Session(engine)

    def tearDown(self):
        self.session.close()


class ApiTestCase(unittest.TestCase):
    """
    Fresh schema + TestClient. Supabase Auth admin calls are replaced with
    mocks (self.identity_update / self.identity_delete).
    """

    def setUp(self):
        reset_database()
        self.client = TestClient(app)

        update_patch = mock.patch.object(IdentityProvider, "update_profile")
        delete_patch = mock.patch.object(IdentityProvider, "delete_account")
        self.identity_update = update_patch.start()
        self.identity_delete = delete_patch.start()
        self.addCleanup(update_patch.stop)
        self.addCleanup(delete_patch.stop)

    def gql(self, query: str, variables: dict | None = None, user: User | None = None) -> dict:
        headers = auth_headers(user) if user is not None else {}
        response = self.client.post(
            settings.GRAPHQL_PATH,
            json={"query": query, "variables": variables or {}},
            headers=headers,
        )
        return response.json()

    def assertGraphQLError(self, body: dict, code: str) -> dict:
        self.assertTrue(body.get("errors"), f"expected {code}, got {body}")
        error = body["errors"][0]
        self.assertEqual(error["extensions"]["code"], code, error)
        return error

    def assertNoErrors(self, body: dict) -> dict:
        self.assertFalse(body.get("errors"), body.get("errors"))
        return body["data"]
