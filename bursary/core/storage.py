# bursary/core/storage.py

import os
import uuid

from fastapi import UploadFile
from loguru import logger

from bursary.core.config import settings
from bursary.core.exceptions import PersistenceError, ValidationError

# Public mount point for files under UPLOAD_DIR (see main.py)
PUBLIC_PREFIX = "/uploads"

ALLOWED_CONTENT_TYPES = {
    "application/pdf": ".pdf",
    "image/png": ".png",
    "image/jpeg": ".jpg",
}


def ensure_upload_dir() -> str:
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    return settings.UPLOAD_DIR


async def save_application_document(file: UploadFile, student_id: int, application_id: int) -> str:
    """
    Stores an uploaded document on local disk.
    - Validates MIME type and size.
    - Ignores the original filename.
    - Returns the public URL path of the stored file.
    """
    extension = ALLOWED_CONTENT_TYPES.get(file.content_type)
    if not extension:
        raise ValidationError("Only PDF, PNG or JPEG files are allowed.")

    file_content = await file.read()

    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB."
        )
    if not file_content:
        raise ValidationError("Uploaded file is empty.")

    relative_dir = os.path.join(str(student_id), str(application_id))
    target_dir = os.path.join(ensure_upload_dir(), relative_dir)
    safe_filename = f"{uuid.uuid4()}{extension}"

    try:
        os.makedirs(target_dir, exist_ok=True)
        with open(os.path.join(target_dir, safe_filename), "wb") as fh:
            fh.write(file_content)
    except OSError as e:
        logger.error(f"Storage write error: {e}")
        raise PersistenceError("Failed to store the uploaded document.")

    return f"{PUBLIC_PREFIX}/{student_id}/{application_id}/{safe_filename}"


def delete_stored_file(file_url: str) -> None:
    """Best-effort removal of a file previously returned by save_application_document."""
    if not file_url or not file_url.startswith(PUBLIC_PREFIX + "/"):
        return

    relative = file_url[len(PUBLIC_PREFIX) + 1:]
    path = os.path.join(settings.UPLOAD_DIR, *relative.split("/"))
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove stored file {path}: {e}")
