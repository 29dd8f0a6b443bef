"""Image geometry helpers."""

from .dimensions import Layout, fit_dimensions, layout_orientation, read_dimensions, read_dimensions_from_bytes
from .orientation import OrientationNormalizer, Transform

__all__ = [
    "Layout",
    "OrientationNormalizer",
    "Transform",
    "fit_dimensions",
    "layout_orientation",
    "read_dimensions",
    "read_dimensions_from_bytes",
]
