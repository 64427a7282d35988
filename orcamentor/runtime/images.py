"""Image ingestion: uploaded files to self-contained data URIs.

Records embed their images inline, so every upload goes through a size
policy before it is stored: files above ``max_bytes`` are rejected and
images larger than ``max_dimension`` on either side are downscaled.
"""

from __future__ import annotations

import base64
import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from orcamentor.runtime.logging import get_logger

logger = get_logger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
MAX_IMAGE_DIMENSION = 1600

_FORMAT_MIME = {"PNG": "image/png", "JPEG": "image/jpeg", "GIF": "image/gif", "WEBP": "image/webp"}


class ImageRejected(ValueError):
    """The upload is too large or not a readable image."""


def bytes_to_data_uri(
    image_bytes: bytes,
    max_bytes: int = MAX_IMAGE_BYTES,
    max_dimension: int = MAX_IMAGE_DIMENSION,
) -> str:
    """
    Validate, normalize and encode image bytes as a data URI.

    Args:
        image_bytes: Raw upload
        max_bytes: Uploads larger than this are rejected outright
        max_dimension: Maximum allowed width or height after ingestion

    Returns:
        ``data:image/...;base64,...`` string
    """
    if len(image_bytes) > max_bytes:
        raise ImageRejected(f"Imagem excede o limite de {max_bytes // 1024} KB")

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageRejected(f"Arquivo não é uma imagem válida: {e}") from e

    source_format = img.format or "PNG"
    width, height = img.size
    if width <= max_dimension and height <= max_dimension and source_format in _FORMAT_MIME:
        mime = _FORMAT_MIME[source_format]
        return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"

    # Apply EXIF orientation before resizing so thumbnails keep their orientation
    img = ImageOps.exif_transpose(img)
    img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    logger.debug("Resized image from %dx%d to %dx%d", width, height, img.width, img.height)

    buffer = io.BytesIO()
    if source_format == "JPEG":
        img.convert("RGB").save(buffer, format="JPEG", quality=90)
        mime = "image/jpeg"
    else:
        if img.mode not in ("RGB", "RGBA", "L", "LA"):
            img = img.convert("RGBA")
        img.save(buffer, format="PNG", optimize=True)
        mime = "image/png"
    return f"data:{mime};base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


def file_to_data_uri(
    path: Path,
    max_bytes: int = MAX_IMAGE_BYTES,
    max_dimension: int = MAX_IMAGE_DIMENSION,
) -> str:
    """Read an image file and return its inline representation."""
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    size = path.stat().st_size
    if size > max_bytes:
        raise ImageRejected(f"Imagem excede o limite de {max_bytes // 1024} KB")
    return bytes_to_data_uri(path.read_bytes(), max_bytes=max_bytes, max_dimension=max_dimension)
