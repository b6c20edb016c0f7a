"""Helpers for base64 data URLs exchanged with the reader app and vendors."""

import base64
import binascii
import re

from ..config.story import STORY_CONSTANTS
from .errors import ImageTooLargeError, InvalidImageError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

# MIME type -> file extension used in storage
IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def validate_drawing(data_url: str) -> str:
    """Check an uploaded drawing before it is sent to a vision model.

    Raises:
        InvalidImageError: If empty or not an image data URL
        ImageTooLargeError: If the payload exceeds the upload limit
    """
    if not data_url:
        raise InvalidImageError("Image data cannot be empty")
    if len(data_url) > STORY_CONSTANTS["max_drawing_data_url_length"]:
        raise ImageTooLargeError()
    if not data_url.startswith("data:image/"):
        raise InvalidImageError()
    return data_url


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a data URL into (MIME type, decoded bytes)."""
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise InvalidImageError("Expected a base64 data URL")
    try:
        raw = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 image data: {e}") from e
    return match.group("mime"), raw


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Encode bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode()}"


def extension_for(mime_type: str) -> str:
    return IMAGE_EXTENSIONS.get(mime_type.lower(), "png")
