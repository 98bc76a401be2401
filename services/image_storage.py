"""Local image storage for profile, cover and recipe pictures.

Uploads are written under `UPLOAD_DIR/<folder>/` with a random name and
served back by the `/uploads` static mount, so the returned URL is stable.
"""

import os
import uuid

from fastapi import UploadFile

from core.config import MAX_UPLOAD_BYTES, PUBLIC_BASE_URL, UPLOAD_DIR
from core.exceptions import ValidationError
from core.logger import get_logger

logger = get_logger("services.image_storage")

ALLOWED_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

CHUNK_SIZE = 1024 * 1024


class LocalImageStorage:
    """Stores uploads on the local filesystem.

    Args:
        root: Directory that holds uploaded files.
        base_url: Prefix prepended to the returned `/uploads/...` path.
        max_bytes: Largest accepted upload.
    """

    def __init__(self, root: str = UPLOAD_DIR, base_url: str = PUBLIC_BASE_URL, max_bytes: int = MAX_UPLOAD_BYTES):
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def store(self, upload: UploadFile, folder: str) -> str:
        """Validate and persist an upload, returning its public URL.

        Raises:
            ValidationError: INVALID_FILE for unsupported types or oversized files.
        """
        content_type = (upload.content_type or "").lower()
        ext = ALLOWED_TYPES.get(content_type)
        if ext is None:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, GIF and WebP images are allowed.",
                field="image",
                code="INVALID_FILE",
            )

        directory = os.path.join(self.root, folder)
        os.makedirs(directory, exist_ok=True)
        filename = f"{uuid.uuid4().hex}.{ext}"
        path = os.path.join(directory, filename)

        size = 0
        with open(path, "wb") as out:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_bytes:
                    break
                out.write(chunk)

        if size > self.max_bytes or size == 0:
            os.remove(path)
            limit_mb = self.max_bytes // (1024 * 1024)
            message = f"File too large. Maximum size is {limit_mb}MB." if size else "Uploaded file is empty"
            raise ValidationError(message, field="image", code="INVALID_FILE")

        logger.info("Stored %s upload %s (%s bytes)", folder, filename, size)
        return f"{self.base_url}/uploads/{folder}/{filename}"


image_storage = LocalImageStorage()
