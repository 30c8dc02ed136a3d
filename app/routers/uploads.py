# app/routers/uploads.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Field, Session, SQLModel

from app.core.auth import requires
from app.core.identity import IdentityProvider
from app.core.storage_utils import (
    build_object_path,
    delete_from_storage,
    upload_to_storage,
    validate_image,
)
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserRead
from app.services.user_service import UserService

router = APIRouter(prefix="/uploads", tags=["Uploads"])

service = UserService(UserRepository(), CartRepository(), IdentityProvider())


class UploadDelete(SQLModel):
    """Object paths relative to the bucket, e.g. "<user_uuid>/<uuid>.png"."""

    paths: list[str] = Field(min_length=1, max_length=100)


@router.post("/avatar", response_model=UserRead, summary="Upload or replace avatar")
def upload_avatar(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(requires("uploadAvatar")),
):
    """
    Upload a new avatar for the current user.

    - Accepts JPEG, PNG, WEBP up to 5MB.
    - Stored at <user_id>/<uuid>.<ext>; the previous avatar is removed.
    """
    file_bytes = file.file.read()
    ext = validate_image(file.content_type, len(file_bytes))
    path = build_object_path(current_user.id, ext)
    url = upload_to_storage(path, file_bytes, file.content_type)
    return service.set_avatar(session, current_user, url)


@router.delete("", dependencies=[Depends(requires("deleteUploads"))])
def delete_uploads(payload: UploadDelete):
    """
    Batch delete objects by path (admin only).
    """
    delete_from_storage(payload.paths)
    return {"deleted": payload.paths}
