"""Derivation of cache file names for resized images."""

from __future__ import annotations

import posixpath
from urllib.parse import unquote

from imagecache.models import ImageEncoding


class CachePathResolver:
    """Maps a (source, dimension, encoding) tuple onto a path relative to the root."""

    def __init__(self, cache_dir: str) -> None:
        self._cache_dir = cache_dir.strip("/")

    @property
    def cache_dir(self) -> str:
        return self._cache_dir

    def resolve(
        self,
        source_path: str,
        width: int,
        height: int = 0,
        encoding: ImageEncoding | str = ImageEncoding.WEBP,
    ) -> str | None:
        """
        Return the cache file name for ``source_path``.

        ``w<width>`` is used when a width is given, ``h<height>`` otherwise.
        Returns ``None`` when neither dimension is positive or the source path
        is unusable.
        """

        if width > 0:
            bucket = f"w{width}"
        elif height > 0:
            bucket = f"h{height}"
        else:
            return None

        stem = self._strip_extension(source_path)
        if stem is None:
            return None

        suffix = ImageEncoding(encoding).value
        return f"{self._cache_dir}/{bucket}/{stem}.{suffix}"

    @staticmethod
    def _strip_extension(source_path: str) -> str | None:
        path = unquote(source_path).strip("/")
        segments = [segment for segment in path.split("/") if segment and segment != "."]
        if not segments or ".." in segments:
            return None
        stem, _ = posixpath.splitext("/".join(segments))
        return stem
