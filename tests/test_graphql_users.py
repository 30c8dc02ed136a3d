import support  # noqa: F401

import unittest
import uuid

from sqlmodel import Session

from app.core.errors import UpstreamServiceError
from app.database import engine
from app.models.user import Role, User
from app.repositories.cart_repo import CartRepository
from app.services.cart_store import CartStore, DatabaseCartBackend

COMPLETE_SIGN_UP = """
mutation {
  completeSignUp(name: "Amina Benali", phoneNumber: "0556-666666", address: "12 Rue Didouche Mourad, Alger") {
    id name role phoneNumber
  }
}
"""


class SignUpTestCase(support.ApiTestCase):
    def setUp(self):
        super().setUp()
        # Supabase account that has no profile row yet
        self.account = User(id=uuid.uuid4(), email="amina@shop.dz", name="")

    def test_first_request_provisions_profile_without_role(self):
        data = self.assertNoErrors(self.gql("{ me { id email name role } }", user=self.account))
        self.assertEqual(data["me"]["email"], "amina@shop.dz")
        self.assertEqual(data["me"]["name"], "amina")
        self.assertIsNone(data["me"]["role"])
        self.assertIsNotNone(support.load(User, self.account.id))

    def test_complete_sign_up_makes_a_customer(self):
        data = self.assertNoErrors(self.gql(COMPLETE_SIGN_UP, user=self.account))
        profile = data["completeSignUp"]
        self.assertEqual(profile["role"], "CUSTOMER")
        self.assertEqual(profile["phoneNumber"], "0556666666")
        self.assertEqual(support.load(User, self.account.id).role, Role.CUSTOMER)

    def test_invalid_sign_up_lists_fields(self):
        body = self.gql(
            'mutation { completeSignUp(name: "A1", phoneNumber: "123", address: "short") { id } }',
            user=self.account,
        )
        error = self.assertGraphQLError(body, "VALIDATION_FAILED")
        fields = {e["field"] for e in error["extensions"]["errors"]}
        self.assertEqual(fields, {"name", "phone_number", "address"})

    def test_pending_user_cannot_order_or_delete(self):
        body = self.gql(
            'mutation { addOrder(input: {items: [], total: 0}) { id } }', user=self.account
        )
        self.assertGraphQLError(body, "UNAUTHORIZED")
        body = self.gql("mutation { deleteCustomerProfile { id } }", user=self.account)
        self.assertGraphQLError(body, "UNAUTHORIZED")

    def test_guest_cannot_sign_up(self):
        self.assertGraphQLError(self.gql(COMPLETE_SIGN_UP), "UNAUTHORIZED")

    def test_invalid_token_is_rejected(self):
        response = self.client.post(
            support.settings.GRAPHQL_PATH,
            json={"query": "{ me { id } }"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")


class ProfileTestCase(support.ApiTestCase):
    def setUp(self):
        super().setUp()
        self.customer = support.create_user(name="Amina Customer")
        self.other = support.create_user(name="Other Customer")
        self.admin = support.create_user(role=Role.ADMIN, name="Admin User")

    def test_update_profile_syncs_account_metadata(self):
        body = self.gql(
            'mutation { updateCustomerProfile(address: "5 Boulevard Zighout Youcef") { name address } }',
            user=self.customer,
        )
        data = self.assertNoErrors(body)
        self.assertEqual(data["updateCustomerProfile"]["address"], "5 Boulevard Zighout Youcef")
        self.assertEqual(data["updateCustomerProfile"]["name"], "Amina Customer")
        self.identity_update.assert_called_once_with(
            self.customer.id, {"address": "5 Boulevard Zighout Youcef"}
        )

    def test_failed_account_sync_keeps_profile_unchanged(self):
        self.identity_update.side_effect = UpstreamServiceError("metadata sync failed")
        body = self.gql(
            'mutation { updateCustomerProfile(name: "New Name") { name } }',
            user=self.customer,
        )
        self.assertGraphQLError(body, "UPSTREAM_SERVICE_FAILED")
        self.assertEqual(support.load(User, self.customer.id).name, "Amina Customer")

    def test_empty_profile_update_changes_nothing(self):
        body = self.gql("mutation { updateCustomerProfile { name } }", user=self.customer)
        self.assertNoErrors(body)
        self.identity_update.assert_not_called()

    def test_delete_own_profile(self):
        with Session(engine) as session:
            store = CartStore(DatabaseCartBackend(session, self.customer.id))
            store.add_to_cart(support.create_product("Shoes"))

        data = self.assertNoErrors(
            self.gql("mutation { deleteCustomerProfile { id name } }", user=self.customer)
        )
        self.assertEqual(data["deleteCustomerProfile"]["id"], str(self.customer.id))
        self.assertIsNone(support.load(User, self.customer.id))
        self.identity_delete.assert_called_once_with(self.customer.id)

        with Session(engine) as session:
            self.assertIsNone(CartRepository().get_snapshot(session, self.customer.id))

    def test_failed_account_deletion_keeps_profile(self):
        self.identity_delete.side_effect = UpstreamServiceError("account deletion failed")
        body = self.gql("mutation { deleteCustomerProfile { id } }", user=self.customer)
        self.assertGraphQLError(body, "UPSTREAM_SERVICE_FAILED")
        self.assertIsNotNone(support.load(User, self.customer.id))

    def test_customer_cannot_delete_someone_else(self):
        body = self.gql(
            "mutation($id: UUID!) { deleteCustomerProfile(userId: $id) { id } }",
            {"id": str(self.other.id)},
            user=self.customer,
        )
        self.assertGraphQLError(body, "ACCESS_DENIED")
        self.identity_delete.assert_not_called()

    def test_admin_deletes_user_with_orders_fails(self):
        shoes = support.create_product("Shoes", price=10.0)
        self.assertNoErrors(self.gql(
            "mutation($input: OrderInput!) { addOrder(input: $input) { id } }",
            {"input": {"items": [{"productId": str(shoes.id), "qte": 1}], "total": 10.0}},
            user=self.customer,
        ))

        body = self.gql(
            "mutation($id: UUID!) { deleteCustomerProfile(userId: $id) { id } }",
            {"id": str(self.customer.id)},
            user=self.admin,
        )
        self.assertGraphQLError(body, "USER_IN_USE")
        self.assertIsNotNone(support.load(User, self.customer.id))
        self.identity_delete.assert_not_called()

    def test_user_lookup(self):
        query = "query($id: UUID!) { user(id: $id) { id name } }"

        data = self.assertNoErrors(self.gql(query, {"id": str(self.other.id)}, user=self.admin))
        self.assertEqual(data["user"]["name"], "Other Customer")

        data = self.assertNoErrors(self.gql(query, {"id": str(self.customer.id)}, user=self.customer))
        self.assertEqual(data["user"]["id"], str(self.customer.id))

        body = self.gql(query, {"id": str(self.other.id)}, user=self.customer)
        self.assertGraphQLError(body, "ACCESS_DENIED")

        body = self.gql(query, {"id": str(uuid.uuid4())}, user=self.admin)
        self.assertGraphQLError(body, "USER_NOT_FOUND")

    def test_admin_user_listing_and_counts(self):
        query = """
        {
          users(filter: {role: CUSTOMER, sortBy: "name", sortDirection: "asc"}) { name }
          usersCount
          customersCount
        }
        """
        data = self.assertNoErrors(self.gql(query, user=self.admin))
        self.assertEqual(
            [u["name"] for u in data["users"]], ["Amina Customer", "Other Customer"]
        )
        self.assertEqual(data["usersCount"], 3)
        self.assertEqual(data["customersCount"], 2)

        self.assertGraphQLError(self.gql("{ usersCount }", user=self.customer), "UNAUTHORIZED")


if __name__ == "__main__":
    unittest.main()
