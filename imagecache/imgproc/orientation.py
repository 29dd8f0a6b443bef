"""
EXIF orientation correction.

Works on any image object exposing ``fliphor``, ``rot90``, ``rot180`` and
``rot270`` returning new images, which is the libvips API. Rotations are
clockwise.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, TypeVar

TOP_LEFT = 1


class Transform(str, Enum):
    """Geometric operations used to undo an EXIF orientation."""

    FLIP_HORIZONTAL = "flip_horizontal"
    ROTATE_90 = "rotate_90"
    ROTATE_180 = "rotate_180"
    ROTATE_270 = "rotate_270"


class OrientablePixels(Protocol):
    def fliphor(self) -> Any: ...

    def rot90(self) -> Any: ...

    def rot180(self) -> Any: ...

    def rot270(self) -> Any: ...


ImageT = TypeVar("ImageT", bound=OrientablePixels)

_TRANSFORMS: dict[int, tuple[Transform, ...]] = {
    1: (),
    2: (Transform.FLIP_HORIZONTAL,),
    3: (Transform.ROTATE_180,),
    4: (Transform.FLIP_HORIZONTAL, Transform.ROTATE_180),
    5: (Transform.FLIP_HORIZONTAL, Transform.ROTATE_270),
    6: (Transform.ROTATE_90,),
    7: (Transform.FLIP_HORIZONTAL, Transform.ROTATE_90),
    8: (Transform.ROTATE_270,),
}

_OPERATIONS = {
    Transform.FLIP_HORIZONTAL: "fliphor",
    Transform.ROTATE_90: "rot90",
    Transform.ROTATE_180: "rot180",
    Transform.ROTATE_270: "rot270",
}


class OrientationNormalizer:
    """Turns EXIF orientation codes into upright pixel data."""

    @staticmethod
    def transforms_for(code: int | None) -> tuple[Transform, ...]:
        """Return the transforms for ``code``; unknown or missing codes need none."""

        if code is None:
            return ()
        return _TRANSFORMS.get(code, ())

    def normalize(self, image: ImageT, code: int | None) -> ImageT:
        """Apply the transforms for ``code`` to ``image`` in order."""

        for transform in self.transforms_for(code):
            image = getattr(image, _OPERATIONS[transform])()
        return image
