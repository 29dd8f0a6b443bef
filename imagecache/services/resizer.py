"""Cached, on-demand resizing of source images."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from imagecache.backends.base import ResizeBackend, ResizeJob
from imagecache.backends.registry import build_backends
from imagecache.cache.freshness import CacheFreshnessValidator
from imagecache.cache.paths import CachePathResolver
from imagecache.cache.provisioning import CacheDirectoryProvisioner
from imagecache.config.settings import Settings
from imagecache.imgproc.dimensions import read_dimensions
from imagecache.metrics.prometheus_exporter import backend_attempts_total, resize_requests_total
from imagecache.models import ImageEncoding, ResizeOutcome, ResizeRequest, SourceImageRef

logger = logging.getLogger(__name__)


class ResizeOrchestrator:
    """
    Entry point of the library.

    Resolves the cache file for a request, reuses it while it is at least as
    new as the source and otherwise runs the configured backends in order
    until one of them writes the derivative.
    """

    def __init__(self, settings: Settings, backends: Sequence[ResizeBackend] | None = None) -> None:
        self._settings = settings
        self._root = settings.root_path
        self._paths = CachePathResolver(settings.cache_dir)
        self._provisioner = CacheDirectoryProvisioner(self._root)
        self._freshness = CacheFreshnessValidator(self._root)
        self._backends = list(backends) if backends is not None else build_backends(settings)
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def backends(self) -> list[ResizeBackend]:
        return list(self._backends)

    def _lock_for(self, relative_path: str) -> asyncio.Lock:
        if relative_path not in self._locks:
            self._locks[relative_path] = asyncio.Lock()
        return self._locks[relative_path]

    def cache_file_name(
        self,
        source_path: str,
        width: int,
        height: int = 0,
        encoding: ImageEncoding | str = ImageEncoding.WEBP,
    ) -> str | None:
        """Return the cache file path relative to the root, or ``None`` for invalid input."""

        return self._paths.resolve(source_path, width, height, encoding)

    def source_url(self, source: SourceImageRef) -> str:
        """Absolute URL under which the remote service can fetch ``source``."""

        return f"{self._settings.site_url.rstrip('/')}/{source.path.lstrip('/')}"

    def image_dimensions(self, local_path: str) -> tuple[int, int] | None:
        """Dimensions of the image at ``local_path`` relative to the root."""

        return read_dimensions(self._root / local_path.lstrip("/"))

    async def resize_image(
        self,
        source_path: str,
        width: int = 0,
        height: int = 0,
        encoding: ImageEncoding | str = ImageEncoding.WEBP,
        quality: int = 80,
    ) -> ResizeOutcome | None:
        """Convenience wrapper building a :class:`ResizeRequest` from plain values."""

        request = ResizeRequest(
            source=SourceImageRef(source_path),
            width=width,
            height=height,
            encoding=encoding,
            quality=quality,
        )
        return await self.produce(request)

    async def produce(self, request: ResizeRequest) -> ResizeOutcome | None:
        """
        Return the derivative for ``request``, generating it when needed.

        ``None`` means no derivative is available: the source is missing, the
        request is invalid, the cache directory could not be created or every
        backend failed. On a cache hit the dimensions are read from the cached
        file header and are 0 when it cannot be read.
        """

        source = await asyncio.to_thread(SourceImageRef.load, self._root, request.source.path)
        if source is None:
            logger.debug("Get Resized Image: Source image %s does not exist", request.source.path)
            resize_requests_total.labels(outcome="invalid").inc()
            return None

        if not request.is_valid:
            logger.error(
                "Get Resized Image: Invalid request for %s (width=%s, height=%s, quality=%s)",
                source.path,
                request.width,
                request.height,
                request.quality,
            )
            resize_requests_total.labels(outcome="invalid").inc()
            return None

        try:
            request = replace(request, encoding=ImageEncoding(request.encoding))
        except ValueError:
            logger.error("Get Resized Image: Invalid file type: %s", request.encoding)
            resize_requests_total.labels(outcome="invalid").inc()
            return None

        relative_path = self._paths.resolve(source.path, request.width, request.height, request.encoding)
        if relative_path is None:
            logger.error("Get Resized Image: Can not build cache file name for %s", source.path)
            resize_requests_total.labels(outcome="invalid").inc()
            return None

        async with self._lock_for(relative_path):
            if not await asyncio.to_thread(self._provisioner.ensure, relative_path):
                resize_requests_total.labels(outcome="failed").inc()
                return None

            cache_path = self._root / relative_path
            entry = await asyncio.to_thread(self._freshness.inspect, relative_path)
            if self._freshness.is_fresh(entry, source):
                size = await asyncio.to_thread(read_dimensions, cache_path)
                width, height = size or (0, 0)
                resize_requests_total.labels(outcome="hit").inc()
                return ResizeOutcome(relative_path, width, height, from_cache=True)

            outcome = await self._run_backends(request, source, relative_path, cache_path)

        resize_requests_total.labels(outcome="generated" if outcome else "failed").inc()
        return outcome

    async def _run_backends(
        self,
        request: ResizeRequest,
        source: SourceImageRef,
        relative_path: str,
        cache_path: Path,
    ) -> ResizeOutcome | None:
        job = ResizeJob(
            source_path=source.resolve(self._root),
            source_url=self.source_url(source),
            cache_path=cache_path,
            width=request.width,
            height=request.height,
            encoding=request.encoding,
            quality=request.quality,
            strip_metadata=self._settings.strip_metadata,
        )

        for backend in self._backends:
            result = await backend.resize(job)
            backend_attempts_total.labels(
                backend=backend.name,
                result="success" if result.success else "failure",
            ).inc()
            if result.success:
                logger.debug(
                    "Get Resized Image: %s created %s (%sx%s)",
                    backend.name,
                    relative_path,
                    result.width,
                    result.height,
                )
                return ResizeOutcome(relative_path, result.width, result.height, backend=backend.name)
            logger.warning("Get Resized Image: backend %s failed for %s", backend.name, source.path)

        logger.error("Get Resized Image: all backends failed for %s", source.path)
        return None

    async def close(self) -> None:
        """Release resources held by the backends."""

        for backend in self._backends:
            await backend.close()
