# scout_bot/vision.py
"""Image input normalization for multimodal turns."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict

from .errors import ImageInputError

log = logging.getLogger(__name__)

_IMG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB cap aligned with Anthropic limits
ALLOWED_MEDIA = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass(frozen=True)
class ImageInput:
    media_type: str
    data: str  # base64, re-encoded

    def to_block(self) -> Dict[str, Any]:
        """Anthropic image content block."""
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": self.media_type, "data": self.data},
        }


def _detect_media_type(image_bytes: bytes) -> str:
    """Detect common image media types from magic numbers."""
    if image_bytes[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\x0a":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if len(image_bytes) >= 12 and image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return ""


def _decode(b64_part: str) -> bytes:
    try:
        raw_bytes = base64.b64decode(b64_part, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ImageInputError(f"invalid_base64: {exc}") from exc
    if not raw_bytes:
        raise ImageInputError("empty_image")
    if len(raw_bytes) > _IMG_MAX_BYTES:
        raise ImageInputError("image_too_large")
    return raw_bytes


def normalize_image(image_input: str) -> ImageInput:
    """
    Accept base64 from FE (data URL or raw) and return the media type plus
    re-encoded data. The declared data-URL type wins when it is allowed;
    otherwise the type is sniffed from the bytes. Raw base64 with no
    recognisable header is treated as JPEG.
    """
    if not isinstance(image_input, str) or not image_input.strip():
        raise ImageInputError("empty_image")
    image_input = image_input.strip()

    if image_input.startswith("data:"):
        try:
            header, b64_part = image_input.split(",", 1)
            declared = header.split(";")[0].split(":", 1)[1].strip().lower()
        except (ValueError, IndexError) as exc:
            raise ImageInputError(f"invalid_data_url: {exc}") from exc
        raw_bytes = _decode(b64_part)
        media_type = declared if declared in ALLOWED_MEDIA else _detect_media_type(raw_bytes)
        source = "data_url"
    else:
        raw_bytes = _decode(image_input)
        media_type = _detect_media_type(raw_bytes) or "image/jpeg"
        source = "raw"

    if media_type not in ALLOWED_MEDIA:
        raise ImageInputError("unsupported_media_type")

    b64_norm = base64.b64encode(raw_bytes).decode("ascii")
    log.info(f"IMG_B64_INPUT | type={source} | mt={media_type} | bytes={len(raw_bytes)} | b64_len={len(b64_norm)}")
    return ImageInput(media_type=media_type, data=b64_norm)
