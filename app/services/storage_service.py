import io
import logging
import os
import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from PIL import Image

from app.core.config import settings

logger = logging.getLogger(__name__)

FOLDER_PATTERN = re.compile(r"[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*")

# Stored extension comes from the decoded image, never from the client's filename
EXTENSIONS_BY_FORMAT = {
    "PNG": "png",
    "JPEG": "jpg",
    "GIF": "gif",
    "WEBP": "webp",
}

@dataclass
class StoredImage:
    url: str
    path: str

def detect_image_format(data: bytes) -> Optional[str]:
    """Decode ``data`` with Pillow and return its format name, or None when it is not an image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            return img.format
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
        return None

class LocalImageStorage:
    """Stores uploaded images on disk; files are served as static content."""

    def __init__(self, base_dir: str, url_prefix: str, max_bytes: int):
        self.base_dir = base_dir
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls) -> "LocalImageStorage":
        return cls(settings.STORAGE_DIR, settings.STORAGE_URL_PREFIX, settings.MAX_UPLOAD_BYTES)

    def validate(self, data: bytes, content_type: Optional[str], folder: str) -> str:
        """Check the upload and return the file extension to store it under."""
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be an image")
        if len(data) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"File size must be less than {limit_mb}MB")
        if not FOLDER_PATTERN.fullmatch(folder):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid folder name")

        extension = EXTENSIONS_BY_FORMAT.get(detect_image_format(data))
        if extension is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be an image")
        return extension

    def save_image(self, data: bytes, content_type: Optional[str], folder: str = "uploads") -> StoredImage:
        extension = self.validate(data, content_type, folder)

        name = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"
        relative_path = f"{folder}/{name}"
        target = os.path.join(self.base_dir, *relative_path.split("/"))

        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.exception("Storage upload error for %s", relative_path)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to upload image: {e}")

        logger.info("Stored image %s (%d bytes)", relative_path, len(data))
        return StoredImage(url=f"{self.url_prefix}/{relative_path}", path=relative_path)
