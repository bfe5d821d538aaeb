"""
Crop photo intake and local file storage.

Uploaded photos arrive as base64 strings (optionally data URLs). They are
decoded, size-checked and verified with Pillow before being written to
the upload directory, which the API serves under /uploads.
"""

import base64
import binascii
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
    "BMP": "bmp",
}


@dataclass
class DecodedImage:
    """A verified image ready for storage and analysis."""
    content: bytes
    format: str
    width: int
    height: int

    @property
    def as_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


def strip_data_url(data: str) -> tuple[str, Optional[str]]:
    """
    Split a data URL into (payload, mime_type).

    Plain base64 strings come back unchanged with no mime type.
    """
    data = data.strip()
    if data.startswith("data:") and "," in data:
        header, payload = data.split(",", 1)
        mime = header[5:].split(";", 1)[0] or None
        return payload, mime
    return data, None


def decode_base64(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 data: {e}")


def decode_image(data: str, max_size_mb: float = 10.0) -> DecodedImage:
    """
    Decode and verify an uploaded photo.

    Raises:
        ValueError: not base64, too small/large, or not a readable image
    """
    payload, _ = strip_data_url(data)
    content = decode_base64(payload)

    if len(content) < 100:
        raise ValueError("Image data too small")
    if len(content) > max_size_mb * 1024 * 1024:
        raise ValueError(f"Image exceeds {max_size_mb:g}MB limit")

    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
        # verify() leaves the image unusable, reopen for metadata
        with Image.open(io.BytesIO(content)) as img:
            fmt = img.format or "JPEG"
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unreadable image: {e}")

    return DecodedImage(content=content, format=fmt, width=width, height=height)


class ImageStore:
    """Writes photos under a directory and hands back their public URL."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, image: DecodedImage) -> str:
        ext = _EXTENSIONS.get(image.format.upper(), "img")
        name = f"{uuid.uuid4().hex}.{ext}"
        (self.root / name).write_bytes(image.content)
        logger.info(f"Stored upload {name} ({len(image.content)} bytes, {image.width}x{image.height})")
        return f"{UPLOAD_URL_PREFIX}/{name}"

    def path_for(self, url: str) -> Optional[Path]:
        """Local path for a URL produced by save(), None for foreign URLs."""
        if not url.startswith(UPLOAD_URL_PREFIX + "/"):
            return None
        name = url[len(UPLOAD_URL_PREFIX) + 1:]
        if "/" in name or name.startswith("."):
            return None
        path = self.root / name
        return path if path.exists() else None
