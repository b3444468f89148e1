"""Decoding and validation of user-submitted drawings.

The frontend canvas posts drawings as ``data:`` URLs
(``data:image/png;base64,iVBOR...``).  Other clients may send bare base64.
Both forms are accepted here; the bytes are then opened with Pillow to make
sure they really are an image in a format the analysis model understands.

The declared MIME type in a data URL is never trusted; the format Pillow
detects is authoritative.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from drawify.core.errors import InvalidDrawingError

logger = logging.getLogger(__name__)

# Pillow format name → MIME type accepted by the analysis model.
SUPPORTED_FORMATS: dict[str, str] = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w-]+=[\w.-]+)*;base64,", re.I)


@dataclass(frozen=True)
class Drawing:
    """A validated drawing ready to be sent to the analysis model.

    Attributes:
        data: Raw image bytes.
        mime_type: MIME type detected from the bytes.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    data: bytes
    mime_type: str
    width: int
    height: int

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Re-encode the drawing as a ``data:`` URL for forwarding."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"


def _strip_data_url(image_data: str) -> str:
    match = _DATA_URL_RE.match(image_data)
    if match:
        return image_data[match.end():]
    if image_data.startswith("data:"):
        raise InvalidDrawingError("imageData must be a base64 data URL")
    return image_data


def decode_drawing(image_data: str | None, max_bytes: int) -> Drawing:
    """Decode and validate a drawing submitted as a data URL or base64 string.

    Args:
        image_data: ``data:image/...;base64,...`` URL or bare base64 text.
        max_bytes: Maximum accepted size of the decoded image.

    Returns:
        The validated :class:`Drawing`.

    Raises:
        InvalidDrawingError: If the input is empty, not valid base64, too
            large, not an image, or in an unsupported format.
    """
    if not image_data or not image_data.strip():
        raise InvalidDrawingError("imageData is required")

    payload = _strip_data_url(image_data.strip())
    # Whitespace can sneak in from line-wrapped base64 encoders.
    payload = re.sub(r"\s+", "", payload)

    # Base64 inflates by 4/3; reject before decoding anything huge.
    padding = len(payload) - len(payload.rstrip("="))
    if len(payload) * 3 // 4 - padding > max_bytes:
        raise InvalidDrawingError(f"Drawing exceeds the {max_bytes} byte limit")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDrawingError("imageData is not valid base64") from exc

    if not raw:
        raise InvalidDrawingError("imageData is empty")
    if len(raw) > max_bytes:
        raise InvalidDrawingError(f"Drawing exceeds the {max_bytes} byte limit")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
            image_format = img.format
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as exc:
        raise InvalidDrawingError("imageData is not a readable image") from exc

    mime_type = SUPPORTED_FORMATS.get(image_format or "")
    if mime_type is None:
        raise InvalidDrawingError(f"Unsupported image format: {image_format}")

    logger.debug("Decoded %s drawing (%dx%d, %d bytes).", mime_type, width, height, len(raw))
    return Drawing(data=raw, mime_type=mime_type, width=width, height=height)
