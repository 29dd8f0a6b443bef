"""Value types shared across the resize engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import unquote


class ImageEncoding(str, Enum):
    """Target encodings a derivative can be written in."""

    WEBP = "webp"
    AVIF = "avif"
    JPEG = "jpeg"
    PNG = "png"


@dataclass(frozen=True, slots=True)
class SourceImageRef:
    """Relative path of a source image plus its last modification time."""

    path: str
    modified_at: float | None = None

    @property
    def normalized_path(self) -> str:
        """Decoded path relative to the root, without a leading slash."""

        return unquote(self.path).lstrip("/")

    def resolve(self, root: Path) -> Path:
        return root / self.normalized_path

    @classmethod
    def load(cls, root: Path, path: str) -> "SourceImageRef | None":
        """Stat ``path`` below ``root`` and return a reference, or ``None`` if it is missing."""

        ref = cls(path)
        target = ref.resolve(root)
        if not target.is_file():
            return None
        try:
            stat = target.stat()
        except OSError:
            return None
        return cls(path, stat.st_mtime)


@dataclass(frozen=True, slots=True)
class ResizeRequest:
    """A single derivative request. Width takes precedence over height."""

    source: SourceImageRef
    width: int = 0
    height: int = 0
    encoding: ImageEncoding = ImageEncoding.WEBP
    quality: int = 80

    @property
    def is_valid(self) -> bool:
        return (self.width > 0 or self.height > 0) and 0 <= self.quality <= 100


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Filesystem state of a derivative at the time it was inspected."""

    relative_path: str
    exists: bool
    modified_at: float | None = None


@dataclass(slots=True)
class ResizeOutcome:
    """Successful result of a resize request."""

    relative_path: str
    width: int
    height: int
    backend: str | None = None
    from_cache: bool = False
