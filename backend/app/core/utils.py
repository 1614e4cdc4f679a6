"""
Utility functions for the application.
"""
from typing import Optional
import base64
import binascii
import re
from app.core.config import settings
from app.core.exceptions import ValidationError

DATA_URI_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)

# Leading bytes used to pick the media type of stored images
_IMAGE_SIGNATURES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def decode_image_data_uri(data_uri: str, field: str = "image") -> bytes:
    """
    Decode a ``data:image/<type>;base64,<payload>`` URI into raw bytes.

    Raises ValidationError when the prefix is not a recognized image type,
    the payload is not valid base64, or the decoded image is too large.
    """
    match = DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise ValidationError(f"Invalid {field} format.")

    media_type = match.group(1).lower()
    if media_type not in settings.ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported {field} type: {media_type}")

    try:
        raw = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f"Invalid {field} encoding.")

    if not raw:
        raise ValidationError(f"Empty {field}.")
    if len(raw) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(f"{field.capitalize()} exceeds maximum size of {settings.MAX_UPLOAD_SIZE} bytes.")
    return raw


def detect_image_type(raw: bytes) -> str:
    """Guess the media type of stored image bytes, defaulting to PNG."""
    for signature, media_type in _IMAGE_SIGNATURES:
        if raw.startswith(signature):
            return media_type
    if raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def encode_image_data_uri(raw: Optional[bytes]) -> Optional[str]:
    """Encode stored image bytes as an inline data URI for clients."""
    if not raw:
        return None
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{detect_image_type(raw)};base64,{encoded}"
