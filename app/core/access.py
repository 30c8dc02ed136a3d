# app/core/access.py
"""
Declarative authorization policy.

Every operation (GraphQL root field or REST action) is listed once in
POLICY with the rule it requires. `authorize()` is the only place roles are
compared; resolvers and routers never check `user.role` themselves.

Rules:
  PUBLIC          no session needed
  AUTHENTICATED   any valid session
  SIGNUP          valid session, not an admin (role unset or CUSTOMER)
  CUSTOMER        role == CUSTOMER
  MEMBER          role in (CUSTOMER, ADMIN)
  ADMIN           role == ADMIN
  OWNER_OR_ADMIN  valid session; once the resource is loaded, the caller
                  must own it or be an admin (else AccessDenied)
"""
import enum
import uuid

from app.core.errors import AccessDeniedError, UnauthorizedError
from app.models.user import Role, User


class Rule(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    SIGNUP = "signup"
    CUSTOMER = "customer"
    MEMBER = "member"
    ADMIN = "admin"
    OWNER_OR_ADMIN = "owner_or_admin"


POLICY: dict[str, Rule] = {
    # ---- Catalog (public reads) ----
    "products": Rule.PUBLIC,
    "paginatedProducts": Rule.PUBLIC,
    "infiniteProducts": Rule.PUBLIC,
    "product": Rule.PUBLIC,
    "productsCount": Rule.PUBLIC,
    "filteredProductsCount": Rule.PUBLIC,
    "availableProductsCount": Rule.PUBLIC,
    "featuredProducts": Rule.PUBLIC,
    "categories": Rule.PUBLIC,
    "featuredCategories": Rule.PUBLIC,
    "category": Rule.PUBLIC,
    "countFilteredCategories": Rule.ADMIN,
    # ---- Catalog administration ----
    "addNewProduct": Rule.ADMIN,
    "updateProduct": Rule.ADMIN,
    "deleteProduct": Rule.ADMIN,
    "createCategory": Rule.ADMIN,
    "updateCategory": Rule.ADMIN,
    "deleteCategory": Rule.ADMIN,
    # ---- Orders ----
    "addOrder": Rule.CUSTOMER,
    "myOrders": Rule.CUSTOMER,
    "order": Rule.OWNER_OR_ADMIN,
    "orderItems": Rule.OWNER_OR_ADMIN,
    "orderItem": Rule.OWNER_OR_ADMIN,
    "orders": Rule.ADMIN,
    "ordersCount": Rule.ADMIN,
    "activeOrdersCount": Rule.ADMIN,
    "filteredOrdersCount": Rule.ADMIN,
    "updateOrder": Rule.ADMIN,
    # ---- Users ----
    "me": Rule.AUTHENTICATED,
    "completeSignUp": Rule.SIGNUP,
    "updateCustomerProfile": Rule.AUTHENTICATED,
    "deleteCustomerProfile": Rule.MEMBER,
    "user": Rule.MEMBER,
    "users": Rule.ADMIN,
    "usersCount": Rule.ADMIN,
    "customersCount": Rule.ADMIN,
    # ---- REST ----
    "cart": Rule.CUSTOMER,
    "checkout": Rule.CUSTOMER,
    "uploadAvatar": Rule.AUTHENTICATED,
    "deleteUploads": Rule.ADMIN,
}


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == Role.ADMIN


def authorize(
    operation: str,
    user: User | None,
    owner_id: uuid.UUID | None = None,
) -> User | None:
    """
    Evaluate the policy for `operation`.

    Args:
        operation: key in POLICY (unknown operations are denied).
        user: current user, or None for guests.
        owner_id: owner of the loaded resource, for OWNER_OR_ADMIN checks.

    Returns:
        The user (None only for PUBLIC operations called by guests).

    Raises:
        UnauthorizedError: no session or insufficient role.
        AccessDeniedError: authenticated but not entitled to this resource.
    """
    rule = POLICY.get(operation)
    if rule is None:
        raise UnauthorizedError(f"Operation '{operation}' is not allowed")

    if rule is Rule.PUBLIC:
        return user

    if user is None:
        raise UnauthorizedError("Authentication required")

    if rule is Rule.ADMIN and user.role != Role.ADMIN:
        raise UnauthorizedError("Admin access required")

    if rule is Rule.CUSTOMER and user.role != Role.CUSTOMER:
        raise UnauthorizedError("Customer access required")

    if rule is Rule.MEMBER and user.role not in (Role.CUSTOMER, Role.ADMIN):
        raise UnauthorizedError("Complete your sign-up first")

    if rule is Rule.SIGNUP and user.role == Role.ADMIN:
        raise UnauthorizedError("Administrators cannot complete customer sign-up")

    if rule is Rule.OWNER_OR_ADMIN and owner_id is not None:
        if owner_id != user.id and not is_admin(user):
            raise AccessDeniedError("Access denied: you can only view your own orders")

    return user
