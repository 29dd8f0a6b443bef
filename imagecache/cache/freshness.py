"""Cache hit/miss decisions based on modification times."""

from __future__ import annotations

import logging
from pathlib import Path

from imagecache.models import CacheEntry, SourceImageRef

logger = logging.getLogger(__name__)


class CacheFreshnessValidator:
    """Compares derivative and source modification times."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def inspect(self, relative_path: str) -> CacheEntry:
        """Inspect the filesystem for a cached derivative."""

        try:
            stat = (self._root / relative_path).stat()
        except FileNotFoundError:
            return CacheEntry(relative_path=relative_path, exists=False)
        return CacheEntry(relative_path=relative_path, exists=True, modified_at=stat.st_mtime)

    def is_fresh(self, entry: CacheEntry, source: SourceImageRef) -> bool:
        """A derivative is fresh when it is at least as new as its source."""

        if not entry.exists or entry.modified_at is None:
            return False
        if source.modified_at is None:
            return False

        logger.debug("Found cache file at %s", entry.relative_path)
        if entry.modified_at >= source.modified_at:
            logger.debug(
                "Cache file is newer (%s >= %s)",
                entry.modified_at,
                source.modified_at,
            )
            return True

        logger.debug("Cache file %s is stale, regenerating", entry.relative_path)
        return False
