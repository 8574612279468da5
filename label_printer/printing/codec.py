"""
Image decode/encode helpers on top of Pillow.
"""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Formats accepted for uploads
SUPPORTED_FORMATS = ("PNG", "JPEG", "BMP", "GIF")

# Modes the PNG encoder writes natively; anything else is converted to RGB
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


def decode_image(data: bytes) -> Optional[Image.Image]:
    """
    Decode PNG/JPEG/BMP/GIF bytes into a fully loaded image.
    Returns None when the bytes are not a recognized or intact image.
    """
    if not data:
        return None
    try:
        img = Image.open(io.BytesIO(data), formats=SUPPORTED_FORMATS)
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.info("Rejected upload: %s", e)
        return None
    except (OSError, SyntaxError, ValueError, EOFError) as e:
        # Truncated or corrupt payloads
        logger.info("Rejected corrupt upload: %s", e)
        return None
    if img.width <= 0 or img.height <= 0:
        return None
    return img


def encode_png(img: Image.Image) -> bytes:
    """
    Encode an image as PNG bytes. Raises OSError on encoder failure.
    """
    if img.mode not in PNG_MODES:
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


__all__ = ["PNG_MODES", "SUPPORTED_FORMATS", "decode_image", "encode_png"]
