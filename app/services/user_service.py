# app/services/user_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.access import is_admin
from app.core.errors import (
    AccessDeniedError,
    NotFoundError,
    UpstreamServiceError,
    commit_or_translate,
    flush_or_translate,
)
from app.core.identity import IdentityProvider
from app.core.storage_utils import discard_public_url
from app.models.user import Role, User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import CompleteSignUp, UserFilter, UserRead, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - enforce app rules (no email change, role only set by sign-up)
      - keep the Supabase account in sync with the profile row
      - orchestrate repository operations
    """

    def __init__(
        self,
        repo: UserRepository,
        cart_repo: CartRepository,
        identity: IdentityProvider,
    ):
        self.repo = repo
        self.cart_repo = cart_repo
        self.identity = identity

    # ----- Self profile -----

    def complete_sign_up(
        self,
        session: Session,
        current_user: User,
        payload: CompleteSignUp,
    ) -> User:
        """
        First-time profile completion.

        The profile row is auto-provisioned in `get_current_user` without a
        role. This fills the contact fields and makes the user a CUSTOMER.
        """
        current_user.name = payload.name
        current_user.phone_number = payload.phone_number
        current_user.address = payload.address
        if current_user.role is None:
            current_user.role = Role.CUSTOMER
        current_user.updated_at = datetime.now(timezone.utc)

        self.repo.add(session, current_user)
        commit_or_translate(session, entity="user", action="update")
        session.refresh(current_user)
        logger.info("User %s completed sign-up", current_user.id)
        return current_user

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits; the changes are pushed to the
        account's user_metadata before the row is committed, so a failed
        push leaves the profile untouched.
        """
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            return current_user

        if payload.name is not None:
            current_user.name = payload.name
        if payload.phone_number is not None:
            current_user.phone_number = payload.phone_number
        if payload.address is not None:
            current_user.address = payload.address
        current_user.updated_at = datetime.now(timezone.utc)

        self.repo.add(session, current_user)
        flush_or_translate(session, entity="user", action="update")
        try:
            self.identity.update_profile(current_user.id, changes)
        except UpstreamServiceError:
            session.rollback()
            raise

        commit_or_translate(session, entity="user", action="update")
        session.refresh(current_user)
        return current_user

    def set_avatar(self, session: Session, current_user: User, image_url: str) -> User:
        """Point the profile at a freshly uploaded avatar; drop the old object."""
        previous = current_user.image_url
        current_user.image_url = image_url
        current_user.updated_at = datetime.now(timezone.utc)
        self.repo.add(session, current_user)
        commit_or_translate(session, entity="user", action="update")
        session.refresh(current_user)

        if previous and previous != image_url:
            discard_public_url(previous)
        return current_user

    def delete_profile(
        self,
        session: Session,
        current_user: User,
        user_id: uuid.UUID | None = None,
    ) -> UserRead:
        """
        Delete a profile and its Supabase account.

        - Customers can only delete themselves (user_id omitted or own id).
        - Admins can delete any user.
        - Profiles referenced by orders cannot be deleted (USER_IN_USE).
        - The row is only removed once the account deletion succeeded.
        """
        target_id = user_id or current_user.id
        if target_id != current_user.id and not is_admin(current_user):
            raise AccessDeniedError("Access denied: you can only delete your own profile")

        target = self.get_user(session, current_user, target_id)
        deleted = UserRead.model_validate(target)

        self.cart_repo.delete_for_owner(session, target.id)
        self.repo.delete(session, target)
        # USER_IN_USE must surface before the account is gone
        flush_or_translate(session, entity="user", action="delete")
        try:
            self.identity.delete_account(deleted.id)
        except UpstreamServiceError:
            session.rollback()
            raise
        commit_or_translate(session, entity="user", action="delete")

        discard_public_url(deleted.image_url)
        logger.info("User %s deleted by %s", deleted.id, current_user.id)
        return deleted

    # ----- Reads -----

    def get_user(
        self,
        session: Session,
        current_user: User,
        user_id: uuid.UUID,
    ) -> User:
        """
        Get a user by id. Admins can read anyone; everyone else only
        themselves.

        Raises:
            AccessDeniedError: reading someone else's profile.
            NotFoundError: USER_NOT_FOUND
        """
        if user_id != current_user.id and not is_admin(current_user):
            raise AccessDeniedError("Access denied: you can only view your own profile")
        user = self.repo.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("user")
        return user

    def list_users(self, session: Session, filters: UserFilter | None = None) -> list[User]:
        return self.repo.list(session, filters)

    def count_users(self, session: Session, filters: UserFilter | None = None) -> int:
        return self.repo.count(session, filters)

    def count_customers(self, session: Session) -> int:
        return self.repo.count_by_role(session, Role.CUSTOMER)

    # ----- Provisioning -----

    def ensure_admin(
        self,
        session: Session,
        user_id: uuid.UUID,
        email: str,
        name: str = "Admin User",
    ) -> User:
        """
        Create or promote the profile row for an existing Supabase account
        to ADMIN. Used by the create_admin script.
        """
        user = self.repo.get_by_id(session, user_id)
        if user is None:
            user = User(id=user_id, email=email, name=name)
        user.role = Role.ADMIN
        user.updated_at = datetime.now(timezone.utc)
        self.repo.add(session, user)
        commit_or_translate(session, entity="user", action="create")
        session.refresh(user)
        return user
