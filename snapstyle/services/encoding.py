"""
Upload decoding — turns what the browser sends into an ImagePayload.

Accepts raw base64, data URLs (data:image/png;base64,...) and raw bytes
from multipart uploads. No image processing happens here.
"""

import base64
import binascii
import mimetypes
import re
from typing import Optional

from ..models.content import ImagePayload

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)


class InvalidImage(ValueError):
    """Upload is not an image we can forward. `reason` keys into the locale messages."""

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason


def is_image_mime(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("image/")


def resolve_mime_type(
    mime_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> Optional[str]:
    """Explicit mime type wins; otherwise guess from the filename."""
    if mime_type:
        return mime_type.lower()
    if filename:
        return mimetypes.guess_type(filename)[0]
    return None


def payload_from_bytes(
    raw: bytes,
    mime_type: Optional[str],
    max_bytes: int,
) -> ImagePayload:
    if not is_image_mime(mime_type):
        raise InvalidImage("invalid_image", f"Unsupported content type: {mime_type!r}")
    if not raw:
        raise InvalidImage("invalid_image", "Empty file")
    if len(raw) > max_bytes:
        raise InvalidImage(
            "image_too_large", f"Image is {len(raw)} bytes (max {max_bytes})",
        )
    return ImagePayload.from_bytes(raw, mime_type)


def payload_from_base64(
    data: str,
    mime_type: Optional[str],
    filename: Optional[str],
    max_bytes: int,
) -> ImagePayload:
    """Decode a base64 string or data URL. A data URL's mime type wins over filename guessing."""
    raw = data.strip()
    match = _DATA_URL.match(raw)
    if match:
        mime_type = mime_type or match.group("mime")
        raw = raw[match.end():]
    elif "," in raw:
        raw = raw.split(",", 1)[1]

    mime_type = resolve_mime_type(mime_type, filename)
    if not is_image_mime(mime_type):
        raise InvalidImage("invalid_image", f"Unsupported content type: {mime_type!r}")

    try:
        decoded = base64.b64decode("".join(raw.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImage("analysis_failed", f"Invalid base64 data: {e}")

    return payload_from_bytes(decoded, mime_type, max_bytes)
