# app/core/identity.py
import logging
import uuid
from typing import Any

from app.core.errors import UpstreamServiceError
from app.core.supabase_client import supabase_admin

logger = logging.getLogger(__name__)


class IdentityProvider:
    """
    Thin adapter over the Supabase Auth admin API.

    The public.users row is our copy of the profile; Supabase keeps the
    account itself (credentials, user_metadata). Profile edits are pushed
    to user_metadata and profile deletion removes the account.
    """

    def update_profile(self, user_id: uuid.UUID, metadata: dict[str, Any]) -> None:
        try:
            supabase_admin().auth.admin.update_user_by_id(
                str(user_id), {"user_metadata": metadata}
            )
        except Exception as exc:
            logger.exception("Auth metadata sync failed for user %s", user_id)
            raise UpstreamServiceError("Could not update the account") from exc

    def delete_account(self, user_id: uuid.UUID) -> None:
        try:
            supabase_admin().auth.admin.delete_user(str(user_id))
        except Exception as exc:
            logger.exception("Auth account deletion failed for user %s", user_id)
            raise UpstreamServiceError("Could not delete the account") from exc
