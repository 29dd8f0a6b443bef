"""Creation of the nested cache directory tree."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

GUARD_FILE_NAME = "index.html"
GUARD_FILE_CONTENT = "<!DOCTYPE html><title></title>"


class CacheDirectoryProvisioner:
    """Creates cache directories below the root, each with an index guard file."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def ensure(self, cache_file_path: str) -> bool:
        """
        Create every directory needed by ``cache_file_path``.

        ``cache_file_path`` is relative to the root. Returns ``False`` when a
        directory or guard file cannot be written; directories created before
        the failure are left in place.
        """

        parent = PurePosixPath(cache_file_path).parent
        if (self._root / parent).exists():
            return True

        parts = [part for part in parent.parts if part not in ("", "/", ".")]
        if not parts:
            return True

        current = self._root
        for part in parts:
            current = current / part
            if not current.exists():
                try:
                    current.mkdir()
                except FileExistsError:
                    pass
                except OSError as exc:
                    logger.error("Failed to create directory %s: %s", current, exc)
                    return False

            guard = current / GUARD_FILE_NAME
            if not guard.exists():
                try:
                    guard.write_text(GUARD_FILE_CONTENT, encoding="utf-8")
                except OSError as exc:
                    logger.error("Failed to write index file %s: %s", guard, exc)
                    return False

        return True
