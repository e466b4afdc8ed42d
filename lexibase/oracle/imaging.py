"""Image helpers used before sending pictures to the vision model."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Mapping

from PIL import Image, UnidentifiedImageError

JPEG_QUALITY = 85


def _fraction(region: Mapping[str, float], key: str) -> float:
    try:
        value = float(region[key])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Region is missing a numeric '{key}'") from exc
    return min(max(value, 0.0), 1.0)


def decode_image(image_base64: str) -> Image.Image:
    """Return a Pillow image decoded from base64 text (data URLs accepted)."""

    payload = image_base64.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        raw = base64.b64decode(payload, validate=False)
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (binascii.Error, UnidentifiedImageError, OSError) as exc:
        raise ValueError("Image payload is not a readable picture") from exc
    return image


def crop_region(image_base64: str, region: Mapping[str, float]) -> str:
    """Crop ``image_base64`` to a fractional ``{x, y, width, height}`` region.

    Returns the cropped picture as base64 JPEG.
    """

    x = _fraction(region, "x")
    y = _fraction(region, "y")
    width = _fraction(region, "width")
    height = _fraction(region, "height")
    if width <= 0 or height <= 0:
        raise ValueError("Region width and height must be positive")

    image = decode_image(image_base64)
    img_width, img_height = image.size
    left = int(round(x * img_width))
    top = int(round(y * img_height))
    right = min(img_width, int(round((x + width) * img_width)))
    bottom = min(img_height, int(round((y + height) * img_height)))
    if right <= left or bottom <= top:
        raise ValueError("Region lies outside the image")

    cropped = image.crop((left, top, right, bottom)).convert("RGB")
    buffer = io.BytesIO()
    cropped.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


__all__ = ["crop_region", "decode_image"]
