"""Helpers for encoded still images travelling as base64 text."""
from __future__ import annotations

import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")

_MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


def strip_data_url(value: str) -> str:
    """Drop a ``data:image/...;base64,`` prefix if present."""
    return _DATA_URL_PREFIX.sub("", value.strip())


def decode_base64_image(value: str) -> bytes:
    """Decode base64 text and make sure it is a readable still image.

    Raises ``ValueError`` when the text is not base64 or Pillow cannot identify it.
    """
    try:
        raw = base64.b64decode(strip_data_url(value), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("image is not valid base64") from e

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError("image could not be decoded") from e
    return raw


def normalize_image(value: str) -> str:
    """Validate ``value`` and return it as bare base64 (no data URL prefix)."""
    decode_base64_image(value)
    return strip_data_url(value)


def guess_mime_type(value: str) -> str:
    """MIME type of a base64 image, defaulting to JPEG like the camera widget."""
    try:
        raw = base64.b64decode(strip_data_url(value))
        with Image.open(io.BytesIO(raw)) as img:
            return _MIME_BY_FORMAT.get(img.format or "", "image/jpeg")
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError):
        return "image/jpeg"
