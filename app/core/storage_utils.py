# app/core/storage_utils.py
import logging
import uuid

from app.core.config import get_settings
from app.core.errors import UpstreamServiceError, ValidationFailedError
from app.core.supabase_client import supabase_admin

settings = get_settings()
logger = logging.getLogger(__name__)

# content-type -> file extension
ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def _bucket():
    # Resolved per call so importing this module never needs the service key
    return supabase_admin().storage.from_(settings.STORAGE_BUCKET)


def validate_image(content_type: str | None, size: int) -> str:
    """
    Check an uploaded image against the allowed types and size limit.

    Returns:
        File extension to use for the stored object.

    Raises:
        ValidationFailedError: on unsupported type, empty or oversized file.
    """
    ext = ALLOWED_IMAGE_CONTENT_TYPES.get(content_type or "")
    if ext is None:
        raise ValidationFailedError.for_field(
            "file", "Unsupported image type (allowed: JPEG, PNG, WEBP)."
        )
    if size == 0:
        raise ValidationFailedError.for_field("file", "Uploaded file is empty.")
    if size > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationFailedError.for_field(
            "file", f"Image too large (max {max_mb}MB)."
        )
    return ext


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


def build_object_path(owner_id: uuid.UUID, ext: str) -> str:
    """Object path convention inside the bucket: {ownerId}/{generatedId}.{ext}"""
    return f"{owner_id}/{generate_filename(ext)}"


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    Args:
        path: Full object path inside the bucket.
              Example: "<user_uuid>/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Returns:
        Public URL to the uploaded file.

    Raises:
        UpstreamServiceError: if the storage call fails.
    """
    bucket = _bucket()
    try:
        bucket.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
    except Exception as exc:
        logger.exception("Upload to %s/%s failed", settings.STORAGE_BUCKET, path)
        raise UpstreamServiceError("File upload failed") from exc
    return bucket.get_public_url(path)


def delete_from_storage(paths: list[str]) -> None:
    """
    Delete objects from Supabase Storage by their paths (batch).

    Example path (relative to bucket):
        '<user_uuid>/<uuid>.png'
    """
    if not paths:
        return
    try:
        _bucket().remove(paths)
    except Exception as exc:
        logger.exception("Batch delete of %d object(s) failed", len(paths))
        raise UpstreamServiceError("File deletion failed") from exc


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/avatars/u/a.png
        -> 'u/a.png'
    """
    marker = f"/storage/v1/object/public/{settings.STORAGE_BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def discard_public_url(url: str | None) -> None:
    """
    Best-effort cleanup of a replaced / orphaned object.
    No-op if the URL does not belong to this bucket; failures are logged.
    """
    if not url:
        return
    path = extract_path_from_public_url(url)
    if not path:
        return
    try:
        delete_from_storage([path])
    except UpstreamServiceError:
        logger.warning("Could not remove old object %s", path)
