"""
Upload validation: extension and size checks per content type, plus an
integrity check for images.

Sets PIL.Image.MAX_IMAGE_PIXELS to prevent decompression-bomb attacks.
"""

import io
import os
import logging

from fastapi import HTTPException
from PIL import Image

from fakefinder.config import settings
from fakefinder.schemas.detection import ContentType

# Prevent decompression-bomb attacks for every image we open
Image.MAX_IMAGE_PIXELS = settings.pil_max_image_pixels

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    ContentType.IMAGE: ['.jpg', '.jpeg', '.png', '.webp', '.gif', '.tiff', '.tif', '.bmp'],
    ContentType.VIDEO: ['.mp4', '.mov', '.avi', '.mkv', '.webm'],
    ContentType.AUDIO: ['.mp3', '.wav', '.ogg', '.flac', '.m4a', '.aac'],
}


def validate_upload(content_type: ContentType, filename: str, filesize: int, content: bytes = None) -> bool:
    """Check extension and size for the content type; verify image bytes when given."""
    ext = os.path.splitext(filename or "")[1].lower()

    if ext not in ALLOWED_EXTENSIONS.get(content_type, []):
        raise HTTPException(status_code=415, detail="Unsupported file format.")

    if filesize <= 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")

    if filesize > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max {settings.max_upload_mb}MB allowed."
        )

    if content is not None and content_type == ContentType.IMAGE:
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except Exception as e:
            logger.error(f"Corrupted or mislabeled image upload ({filename}): {e}")
            raise HTTPException(status_code=400, detail="Invalid file content or format mismatch.")

    return True
