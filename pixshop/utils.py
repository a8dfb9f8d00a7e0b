"""
Utility functions for image payloads.
"""

from io import BytesIO
from typing import Tuple
import base64
import binascii
import re

from PIL import Image, UnidentifiedImageError

from .editing.models import Size
from .errors import ValidationError

UNKNOWN_MIME = "application/octet-stream"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$", re.S)


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URL.

    Args:
        data_url: String like `data:image/png;base64,iVBOR...`

    Returns:
        (mime_type, raw bytes)

    Raises:
        ValidationError: If the URL is malformed or has no MIME type
    """
    match = _DATA_URL_RE.match(data_url.strip())
    if not match:
        raise ValidationError("Invalid data URL")
    if not match.group("mime"):
        raise ValidationError("Could not parse MIME type from data URL")

    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 payload in data URL: {e}")

    return match.group("mime"), payload


def read_image_info(data: bytes) -> Tuple[Size, str]:
    """
    Read natural size and MIME type from an encoded image without decoding pixels.

    Raises:
        ValidationError: If the bytes are not a readable image
    """
    try:
        with Image.open(BytesIO(data)) as image:
            width, height = image.size
            mime_type = Image.MIME.get(image.format or "", UNKNOWN_MIME)
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError(f"Unsupported or corrupt image: {e}")

    return Size(width, height), mime_type


def read_image_size(data: bytes) -> Size:
    return read_image_info(data)[0]
