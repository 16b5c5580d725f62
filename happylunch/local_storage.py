import io
import logging
import os
import uuid

import aiofiles
from PIL import Image, UnidentifiedImageError

from .config import settings

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = {"JPEG": ".jpg", "PNG": ".png", "GIF": ".gif", "WEBP": ".webp"}


class InvalidImageError(ValueError):
    pass


def ensure_upload_dir() -> str:
    os.makedirs(settings.upload_dir, exist_ok=True)
    return settings.upload_dir


def detect_image_extension(file_data: bytes) -> str:
    """Return the file extension for the image bytes, rejecting non-images"""
    try:
        with Image.open(io.BytesIO(file_data)) as image:
            image.verify()
            image_format = image.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"File must be an image: {e}")
    if image_format not in ALLOWED_FORMATS:
        raise InvalidImageError(f"Unsupported image format: {image_format}")
    return ALLOWED_FORMATS[image_format]


async def save_file(file_data: bytes) -> str:
    """Save an image locally and return its URL path"""
    # Generate a unique filename to prevent collisions
    unique_filename = f"{uuid.uuid4()}{detect_image_extension(file_data)}"
    file_path = os.path.join(ensure_upload_dir(), unique_filename)

    async with aiofiles.open(file_path, 'wb') as f:
        await f.write(file_data)

    logger.info("Stored upload %s (%d bytes)", unique_filename, len(file_data))
    return f"/uploads/{unique_filename}"
