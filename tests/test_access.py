import support  # noqa: F401

import unittest
import uuid

from app.core.access import POLICY, Rule, authorize
from app.core.errors import AccessDeniedError, UnauthorizedError
from app.models.user import Role, User


def user(role):
    return User(id=uuid.uuid4(), email="someone@shop.dz", name="Someone", role=role)


class AuthorizeTestCase(unittest.TestCase):
    def setUp(self):
        self.customer = user(Role.CUSTOMER)
        self.other_customer = user(Role.CUSTOMER)
        self.admin = user(Role.ADMIN)
        self.pending = user(None)

    def test_public_operations_allow_guests(self):
        for operation in ("products", "product", "categories", "availableProductsCount"):
            self.assertIsNone(authorize(operation, None))

    def test_admin_only_operations(self):
        for operation, rule in POLICY.items():
            if rule is not Rule.ADMIN:
                continue
            with self.subTest(operation=operation):
                self.assertIs(authorize(operation, self.admin), self.admin)
                with self.assertRaises(UnauthorizedError):
                    authorize(operation, self.customer)
                with self.assertRaises(UnauthorizedError):
                    authorize(operation, None)

    def test_count_filtered_categories_requires_admin(self):
        with self.assertRaises(UnauthorizedError):
            authorize("countFilteredCategories", None)
        authorize("countFilteredCategories", self.admin)

    def test_order_submission_is_customer_only(self):
        authorize("addOrder", self.customer)
        with self.assertRaises(UnauthorizedError):
            authorize("addOrder", self.admin)
        with self.assertRaises(UnauthorizedError):
            authorize("addOrder", self.pending)

    def test_owner_or_admin(self):
        owner_id = self.customer.id
        authorize("order", self.customer, owner_id=owner_id)
        authorize("order", self.admin, owner_id=owner_id)
        with self.assertRaises(AccessDeniedError):
            authorize("order", self.other_customer, owner_id=owner_id)
        with self.assertRaises(UnauthorizedError):
            authorize("order", None, owner_id=owner_id)

    def test_sign_up_open_to_pending_users_only(self):
        authorize("completeSignUp", self.pending)
        authorize("completeSignUp", self.customer)
        with self.assertRaises(UnauthorizedError):
            authorize("completeSignUp", self.admin)

    def test_member_operations_need_a_role(self):
        with self.assertRaises(UnauthorizedError):
            authorize("deleteCustomerProfile", self.pending)
        authorize("deleteCustomerProfile", self.customer)

    def test_unknown_operation_is_denied(self):
        with self.assertRaises(UnauthorizedError):
            authorize("dropEverything", self.admin)


if __name__ == "__main__":
    unittest.main()
