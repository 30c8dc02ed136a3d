import support  # noqa: F401

import asyncio
import unittest
import uuid
from unittest import mock

from app.graphql.context import category_service, product_service
from app.models.category import Category
from app.models.product import Product
from app.models.user import Role

PRODUCT_FIELDS = "id name price qteInStock categoryId"


def event_loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class CatalogReadTestCase(support.ApiTestCase):
    def setUp(self):
        super().setUp()
        self.shoes = support.create_category("Shoes", minutes=1)
        self.hats = support.create_category("Hats", minutes=2)
        self.sneaker = support.create_product(
            "Running sneaker", price=80, qte_in_stock=25, category_id=self.shoes.id, minutes=1
        )
        self.boot = support.create_product(
            "Leather boot", price=120, qte_in_stock=4, category_id=self.shoes.id, minutes=2
        )
        self.cap = support.create_product(
            "Wool cap", price=15, qte_in_stock=0, category_id=self.hats.id,
            description="Warm winter cap", minutes=3,
        )

    def names(self, rows):
        return [row["name"] for row in rows]

    def test_products_are_public_and_newest_first(self):
        data = self.assertNoErrors(self.gql(f"{{ products {{ {PRODUCT_FIELDS} }} }}"))
        self.assertEqual(self.names(data["products"]), ["Wool cap", "Leather boot", "Running sneaker"])

    def test_search_matches_name_and_description(self):
        query = f"query($f: ProductFilterInput) {{ paginatedProducts(filter: $f) {{ {PRODUCT_FIELDS} }} }}"
        data = self.assertNoErrors(self.gql(query, {"f": {"searchQuery": "WINTER"}}))
        self.assertEqual(self.names(data["paginatedProducts"]), ["Wool cap"])

        data = self.assertNoErrors(self.gql(query, {"f": {"searchQuery": "leather"}}))
        self.assertEqual(self.names(data["paginatedProducts"]), ["Leather boot"])

    def test_search_wildcards_match_literally(self):
        support.create_product("Cap_2024 edition", minutes=4)
        query = "query($f: ProductFilterInput) { filteredProductsCount(filter: $f) }"

        data = self.assertNoErrors(self.gql(query, {"f": {"searchQuery": "_"}}))
        self.assertEqual(data["filteredProductsCount"], 1)

        data = self.assertNoErrors(self.gql(query, {"f": {"searchQuery": "%"}}))
        self.assertEqual(data["filteredProductsCount"], 0)

    def test_stock_buckets(self):
        query = "query($f: ProductFilterInput) { filteredProductsCount(filter: $f) }"
        for bucket, expected in (("In Stock", 1), ("Low Stock", 1), ("Out Stock", 1), ("", 3)):
            with self.subTest(bucket=bucket):
                data = self.assertNoErrors(self.gql(query, {"f": {"stock": bucket}}))
                self.assertEqual(data["filteredProductsCount"], expected)

    def test_price_category_and_sort(self):
        query = f"query($f: ProductFilterInput) {{ paginatedProducts(filter: $f) {{ {PRODUCT_FIELDS} }} }}"
        data = self.assertNoErrors(self.gql(query, {"f": {
            "categoryId": str(self.shoes.id),
            "minPrice": 50,
            "sortBy": "price",
            "sortDirection": "asc",
        }}))
        self.assertEqual(self.names(data["paginatedProducts"]), ["Running sneaker", "Leather boot"])

    def test_pagination_windows(self):
        for i in range(6):
            support.create_product(f"Extra item {i}", minutes=10 + i)

        query = f"query($f: ProductFilterInput) {{ paginatedProducts(filter: $f) {{ {PRODUCT_FIELDS} }} }}"
        page2 = self.assertNoErrors(self.gql(query, {"f": {"limit": 5, "currentPage": 2}}))
        self.assertEqual(len(page2["paginatedProducts"]), 4)

        infinite = self.assertNoErrors(self.gql(
            f"{{ infiniteProducts(limit: 5, offset: 5) {{ {PRODUCT_FIELDS} }} }}"
        ))
        self.assertEqual(
            self.names(infinite["infiniteProducts"]), self.names(page2["paginatedProducts"])
        )

    def test_invalid_filter_is_validation_failed(self):
        query = "query($f: ProductFilterInput) { filteredProductsCount(filter: $f) }"
        body = self.gql(query, {"f": {"limit": 500}})
        self.assertGraphQLError(body, "VALIDATION_FAILED")

        body = self.gql(query, {"f": {
            "startDate": "2025-02-01T00:00:00+00:00",
            "endDate": "2025-01-01T00:00:00+00:00",
        }})
        self.assertGraphQLError(body, "VALIDATION_FAILED")

    def test_counts(self):
        data = self.assertNoErrors(self.gql("{ productsCount availableProductsCount }"))
        self.assertEqual(data, {"productsCount": 3, "availableProductsCount": 2})

    def test_missing_product_is_null(self):
        data = self.assertNoErrors(self.gql(
            "query($id: UUID!) { product(id: $id) { id } }", {"id": str(uuid.uuid4())}
        ))
        self.assertIsNone(data["product"])

    def test_product_exposes_category_and_category_exposes_products(self):
        data = self.assertNoErrors(self.gql(
            "query($id: UUID!) { product(id: $id) { name category { name } } }",
            {"id": str(self.cap.id)},
        ))
        self.assertEqual(data["product"]["category"]["name"], "Hats")

        data = self.assertNoErrors(self.gql(
            "query($id: UUID!) { category(id: $id) { name products { name } } }",
            {"id": str(self.shoes.id)},
        ))
        self.assertEqual(
            self.names(data["category"]["products"]), ["Leather boot", "Running sneaker"]
        )

    def test_database_resolvers_run_outside_the_event_loop(self):
        calls = []

        def recording(method):
            def call(*args, **kwargs):
                calls.append((method.__name__, event_loop_running()))
                return method(*args, **kwargs)
            return call

        with mock.patch.object(
            product_service, "list_products", side_effect=recording(product_service.list_products)
        ), mock.patch.object(
            category_service, "get_category", side_effect=recording(category_service.get_category)
        ):
            data = self.assertNoErrors(self.gql("{ products { name category { name } } }"))

        self.assertEqual(len(data["products"]), 3)
        self.assertEqual(calls[0], ("list_products", False))
        self.assertEqual(
            [running for name, running in calls if name == "get_category"], [False] * 3
        )

    def test_categories_and_featured(self):
        data = self.assertNoErrors(self.gql(
            "{ categories { name } featuredCategories(head: 1) { name } featuredProducts(head: 2) { name } }"
        ))
        self.assertEqual(self.names(data["categories"]), ["Hats", "Shoes"])
        self.assertEqual(self.names(data["featuredCategories"]), ["Hats"])
        self.assertEqual(self.names(data["featuredProducts"]), ["Wool cap", "Leather boot"])

    def test_count_filtered_categories_is_admin_only(self):
        query = 'query { countFilteredCategories(searchQuery: "sho") }'
        self.assertGraphQLError(self.gql(query), "UNAUTHORIZED")
        self.assertGraphQLError(self.gql(query, user=support.create_user()), "UNAUTHORIZED")

        admin = support.create_user(role=Role.ADMIN)
        data = self.assertNoErrors(self.gql(query, user=admin))
        self.assertEqual(data["countFilteredCategories"], 1)


class CatalogAdminTestCase(support.ApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = support.create_user(role=Role.ADMIN, name="Admin User")
        self.customer = support.create_user()

    def create_category(self, name, user=None):
        return self.gql(
            "mutation($input: CategoryInput!) { createCategory(input: $input) { id name } }",
            {"input": {"name": name}},
            user=user or self.admin,
        )

    def test_create_category_twice_is_already_exists(self):
        data = self.assertNoErrors(self.create_category("Shoes"))
        self.assertEqual(data["createCategory"]["name"], "Shoes")

        error = self.assertGraphQLError(self.create_category("Shoes"), "CATEGORY_ALREADY_EXISTS")
        self.assertIn("already exists", error["message"])

    def test_category_mutations_require_admin(self):
        self.assertGraphQLError(self.create_category("Shoes", user=self.customer), "UNAUTHORIZED")
        body = self.gql(
            'mutation { createCategory(input: {name: "Shoes"}) { id } }'
        )
        self.assertGraphQLError(body, "UNAUTHORIZED")

    def test_invalid_category_name(self):
        body = self.create_category("S")
        error = self.assertGraphQLError(body, "VALIDATION_FAILED")
        self.assertEqual(error["extensions"]["errors"][0]["field"], "name")

    def test_update_category(self):
        category = support.create_category("Shoes")
        body = self.gql(
            "mutation($id: UUID!) { updateCategory(id: $id, input: {name: \"Boots\"}) { name updatedAt } }",
            {"id": str(category.id)},
            user=self.admin,
        )
        data = self.assertNoErrors(body)
        self.assertEqual(data["updateCategory"]["name"], "Boots")
        self.assertIsNotNone(data["updateCategory"]["updatedAt"])

        body = self.gql(
            "mutation($id: UUID!) { updateCategory(id: $id, input: {name: \"Boots\"}) { name } }",
            {"id": str(uuid.uuid4())},
            user=self.admin,
        )
        self.assertGraphQLError(body, "CATEGORY_NOT_FOUND")

    def test_delete_category_in_use_fails(self):
        category = support.create_category("Shoes")
        support.create_product("Running sneaker", category_id=category.id)

        body = self.gql(
            "mutation($id: UUID!) { deleteCategory(id: $id) { id name } }",
            {"id": str(category.id)},
            user=self.admin,
        )
        self.assertGraphQLError(body, "CATEGORY_IN_USE")
        self.assertIsNotNone(support.load(Category, category.id))

    def test_delete_unreferenced_category_returns_row(self):
        category = support.create_category("Shoes")
        body = self.gql(
            "mutation($id: UUID!) { deleteCategory(id: $id) { id name } }",
            {"id": str(category.id)},
            user=self.admin,
        )
        data = self.assertNoErrors(body)
        self.assertEqual(data["deleteCategory"], {"id": str(category.id), "name": "Shoes"})
        self.assertIsNone(support.load(Category, category.id))

    def test_product_lifecycle(self):
        category = support.create_category("Shoes")
        body = self.gql(
            """
            mutation($input: ProductInput!) {
              addNewProduct(input: $input) { id name price qteInStock categoryId }
            }
            """,
            {"input": {
                "name": "Trail runner",
                "price": 95.5,
                "qteInStock": 7,
                "categoryId": str(category.id),
            }},
            user=self.admin,
        )
        created = self.assertNoErrors(body)["addNewProduct"]
        self.assertEqual(created["qteInStock"], 7)

        body = self.gql(
            "mutation($id: UUID!) { updateProduct(id: $id, input: {price: 80}) { name price } }",
            {"id": created["id"]},
            user=self.admin,
        )
        self.assertEqual(
            self.assertNoErrors(body)["updateProduct"], {"name": "Trail runner", "price": 80.0}
        )

        body = self.gql(
            "mutation($id: UUID!) { deleteProduct(id: $id) { id name } }",
            {"id": created["id"]},
            user=self.admin,
        )
        self.assertEqual(self.assertNoErrors(body)["deleteProduct"]["name"], "Trail runner")
        self.assertIsNone(support.load(Product, uuid.UUID(created["id"])))

    def test_product_validation_and_references(self):
        body = self.gql(
            'mutation { addNewProduct(input: {name: "X", price: -1, qteInStock: 1}) { id } }',
            user=self.admin,
        )
        error = self.assertGraphQLError(body, "VALIDATION_FAILED")
        fields = {e["field"] for e in error["extensions"]["errors"]}
        self.assertEqual(fields, {"name", "price"})

        body = self.gql(
            "mutation($input: ProductInput!) { addNewProduct(input: $input) { id } }",
            {"input": {"name": "Lost item", "price": 1, "qteInStock": 1, "categoryId": str(uuid.uuid4())}},
            user=self.admin,
        )
        self.assertGraphQLError(body, "INVALID_DATA_REFERENCE")

    def test_update_product_can_clear_optional_fields(self):
        category = support.create_category("Shoes")
        product = support.create_product(
            "Trail runner", category_id=category.id, description="Grippy sole"
        )
        mutation = "mutation($id: UUID!, $input: ProductUpdateInput!) { updateProduct(id: $id, input: $input) { name description categoryId } }"

        body = self.gql(
            mutation,
            {"id": str(product.id), "input": {"description": None, "categoryId": None}},
            user=self.admin,
        )
        self.assertEqual(
            self.assertNoErrors(body)["updateProduct"],
            {"name": "Trail runner", "description": None, "categoryId": None},
        )
        stored = support.load(Product, product.id)
        self.assertIsNone(stored.description)
        self.assertIsNone(stored.category_id)

        body = self.gql(mutation, {"id": str(product.id), "input": {"name": None}}, user=self.admin)
        error = self.assertGraphQLError(body, "VALIDATION_FAILED")
        self.assertEqual([e["field"] for e in error["extensions"]["errors"]], ["name"])

    def test_delete_missing_product(self):
        body = self.gql(
            "mutation($id: UUID!) { deleteProduct(id: $id) { id } }",
            {"id": str(uuid.uuid4())},
            user=self.admin,
        )
        self.assertGraphQLError(body, "PRODUCT_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
