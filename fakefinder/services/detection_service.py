"""
Detection request helpers: turn an upload or a text body into the
ContentDescriptor the engine works from.

Only superficial facts are read: filename, size, declared MIME type and,
for images, the pixel dimensions. Nothing is decoded beyond the image header.
"""

import io
import logging
from typing import Optional, Tuple

from fastapi import HTTPException
from PIL import Image

from fakefinder.config import settings
from fakefinder.schemas.detection import ContentDescriptor, ContentType

logger = logging.getLogger(__name__)


def read_image_dimensions(content: bytes) -> Tuple[Optional[int], Optional[int]]:
    """(width, height) from the image header, or (None, None) if unreadable."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            return img.size
    except Exception as e:
        logger.warning(f"[DETECT] Could not read image dimensions: {e}")
        return None, None


def build_media_descriptor(
    content_type: ContentType,
    filename: str,
    content: bytes,
    mime_type: Optional[str] = None,
) -> ContentDescriptor:
    width = height = None
    if content_type == ContentType.IMAGE:
        width, height = read_image_dimensions(content)

    return ContentDescriptor(
        content_type=content_type,
        filename=filename,
        file_size=len(content),
        mime_type=mime_type or "",
        width=width,
        height=height,
    )


def build_text_descriptor(text: str) -> ContentDescriptor:
    text = (text or "").strip()
    if len(text) < settings.text_min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Text too short. At least {settings.text_min_length} characters are required."
        )
    return ContentDescriptor(content_type=ContentType.TEXT, text=text, file_size=len(text.encode("utf-8")))
