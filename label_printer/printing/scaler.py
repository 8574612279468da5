"""
Label scaling for tape printers.

The print head only supports binary pixels, so scaled labels come out as
mode "1" images. Resampling and binary conversion are separate steps so a
caller can binarize an image that needed no scaling.
"""

from __future__ import annotations

import logging

from PIL import Image

logger = logging.getLogger(__name__)

# Gray level at or above which a pixel stays white (unprinted)
BINARY_THRESHOLD = 128


def target_width(width: int, height: int, target_height: int) -> int:
    """
    Width that keeps the aspect ratio at target_height.

    Truncates toward zero (int(), not round()); clamped to 1 for inputs so
    wide and short that truncation would produce an empty image.
    """
    scale = target_height / height
    return max(1, int(width * scale))


def _wide_to_l(img: Image.Image, always_scale: bool) -> Image.Image:
    """
    Map a 32-bit integer (mode "I") image holding 16-bit samples onto 0..255.
    Mode "I" images whose values already fit 8 bits are taken as they are.
    """
    if always_scale or img.getextrema()[1] > 255:
        img = img.point(lambda x: x * (1.0 / 256))
    return img.convert("L")


def _flatten(img: Image.Image) -> Image.Image:
    """
    Grayscale copy of img with any transparency composited onto white.
    """
    if img.mode.startswith("I;16"):
        return _wide_to_l(img.convert("I"), always_scale=True)
    if img.mode == "I":
        return _wide_to_l(img, always_scale=False)
    if img.mode == "P":
        img = img.convert("RGBA") if "transparency" in img.info else img.convert("RGB")
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "RGB" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        bg = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(bg, rgba).convert("L")
    if img.mode == "L":
        return img.copy()
    return img.convert("L")


def resample(img: Image.Image, width: int, height: int) -> Image.Image:
    """
    Smoothly resample img to width x height as a grayscale image.
    """
    return _flatten(img).resize((width, height), Image.Resampling.BILINEAR)


def to_binary(img: Image.Image) -> Image.Image:
    """
    Threshold img to a 1-bit image (no dithering).
    """
    if img.mode == "1":
        return img.copy()
    gray = img if img.mode == "L" else _flatten(img)
    return gray.point(lambda x: 255 if x >= BINARY_THRESHOLD else 0).convert("1", dither=Image.Dither.NONE)


def scale_label(img: Image.Image, target_height: int) -> Image.Image:
    """
    Scale img to exactly target_height pixels tall, keeping its proportions,
    and return it as a 1-bit image ready for the print head.
    """
    if target_height <= 0:
        raise ValueError(f"target height must be positive, got {target_height}")
    if img.height <= 0:
        raise ValueError("cannot scale an image with zero height")

    width = target_width(img.width, img.height, target_height)
    logger.info(
        "Need to scale image. original: %dx%d scaled: %dx%d",
        img.width,
        img.height,
        width,
        target_height,
    )
    return to_binary(resample(img, width, target_height))


__all__ = ["BINARY_THRESHOLD", "resample", "scale_label", "target_width", "to_binary"]
