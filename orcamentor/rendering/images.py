"""Embedded image decoding for PDF rendering.

Images arrive as inline data URIs. Each one is decoded and fully loaded with
Pillow before layout starts, then re-encoded as PNG, so a corrupt image is
detected here (and skipped) rather than halfway through drawing a page.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image as ImageFlowable

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w/+.-]+)?(?P<params>(?:;[\w-]+=[^;,]*)*)(?P<b64>;base64)?,(?P<data>.*)$",
    re.S,
)


def decode_data_uri(uri: str) -> bytes:
    """
    Decode an inline ``data:`` URI to raw bytes.

    Bare base64 (no ``data:`` prefix) is accepted too.
    """
    text = uri.strip()
    match = _DATA_URI_RE.match(text)
    if match and not match.group("b64"):
        raise ValueError("Only base64 data URIs are supported")
    payload = match.group("data") if match else text
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


@dataclass(frozen=True)
class EmbeddedImage:
    """A verified raster image, stored as PNG bytes."""

    png: bytes
    width: int
    height: int

    def reader(self) -> ImageReader:
        return ImageReader(io.BytesIO(self.png))

    def fit(self, max_width: float, max_height: float) -> tuple[float, float]:
        """Largest size inside the box that keeps the aspect ratio."""
        scale = min(max_width / self.width, max_height / self.height)
        return self.width * scale, self.height * scale

    def flowable(self, max_width: float, max_height: float) -> ImageFlowable:
        width, height = self.fit(max_width, max_height)
        return ImageFlowable(io.BytesIO(self.png), width=width, height=height)

    def faded(self, opacity: int) -> EmbeddedImage:
        """Copy with the alpha channel scaled to ``opacity`` percent."""
        opacity = min(100, max(0, opacity))
        img = Image.open(io.BytesIO(self.png)).convert("RGBA")
        alpha = img.getchannel("A").point(lambda a: a * opacity // 100)
        img.putalpha(alpha)
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return EmbeddedImage(png=buffer.getvalue(), width=self.width, height=self.height)


def load_image(uri: str | None, label: str = "image") -> EmbeddedImage | None:
    """
    Decode and verify an inline image.

    Returns None for a missing image. A corrupt or unreadable image is logged
    and also returns None so the caller can lay out the document without it.
    """
    if not uri:
        return None
    try:
        raw = decode_data_uri(uri)
        img = Image.open(io.BytesIO(raw))
        img.load()
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("Skipping unreadable %s: %s", label, e)
        return None
    if img.width <= 0 or img.height <= 0:
        logger.warning("Skipping empty %s", label)
        return None
    return EmbeddedImage(png=buffer.getvalue(), width=img.width, height=img.height)
