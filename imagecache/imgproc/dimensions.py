"""Dimension helpers shared by the resize backends."""

from __future__ import annotations

import logging
import math
from enum import Enum
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class Layout(str, Enum):
    """Shape of an image derived from its dimensions."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"


def layout_orientation(width: int, height: int) -> Layout:
    """Return whether an image of ``width`` x ``height`` is landscape, portrait or square."""

    if width > height:
        return Layout.LANDSCAPE
    if height > width:
        return Layout.PORTRAIT
    return Layout.SQUARE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fit_dimensions(orig_width: int, orig_height: int, width: int, height: int) -> tuple[int, int]:
    """
    Resolve the output size from the driving dimension.

    Width wins when both are set; the other side keeps the aspect ratio and is
    rounded to the nearest pixel (at least 1).
    """

    if orig_width <= 0 or orig_height <= 0:
        raise ValueError(f"Invalid source dimensions {orig_width}x{orig_height}")
    if width > 0:
        return width, max(1, _round_half_up(orig_height * (width / orig_width)))
    if height > 0:
        return max(1, _round_half_up(orig_width * (height / orig_height))), height
    raise ValueError("Either width or height must be positive")


def read_dimensions(path: Path) -> tuple[int, int] | None:
    """Read width and height from the image header at ``path``."""

    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
        logger.warning("Failed to load image %s to get sizes: %s", path, exc)
        return None


def read_dimensions_from_bytes(data: bytes) -> tuple[int, int] | None:
    """Same as :func:`read_dimensions` for an in-memory image."""

    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
        logger.warning("Failed to read image dimensions from response body: %s", exc)
        return None
