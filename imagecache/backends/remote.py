"""Resize backend delegating to an imaginary-compatible HTTP service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from imagecache.backends.base import PNG_COMPRESSION_LEVEL, BackendResult, ResizeJob
from imagecache.cache.storage import atomic_write_bytes
from imagecache.config.settings import Settings
from imagecache.imgproc.dimensions import read_dimensions_from_bytes
from imagecache.models import ImageEncoding

logger = logging.getLogger(__name__)


class RemoteResizeBackend:
    """Requests resized images from the remote service and stores the body verbatim."""

    name = "remote"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport
        self._url = settings.imaginary_url
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.request_timeout,
                transport=self._transport,
            )
        return self._client

    def build_query(self, job: ResizeJob) -> dict[str, Any]:
        """Query parameters for ``job``; only the driving dimension is sent."""

        query: dict[str, Any] = {
            "type": job.encoding.value,
            "url": job.source_url,
            "stripmeta": "true" if job.strip_metadata else "false",
        }
        if job.encoding is ImageEncoding.PNG:
            query["compression"] = PNG_COMPRESSION_LEVEL
        else:
            query["quality"] = job.quality
        if job.width > 0:
            query["width"] = job.width
        elif job.height > 0:
            query["height"] = job.height
        return query

    async def resize(self, job: ResizeJob) -> BackendResult:
        query = self.build_query(job)
        logger.debug("Imaginary: Trying to get resized image: %s %s", self._url, query)

        try:
            response = await self._get_client().get(self._url, params=query)
        except httpx.HTTPError as exc:
            logger.error("Imaginary: Failed to get response: %s", exc)
            return BackendResult.failed()

        if response.status_code != 200:
            logger.error("Imaginary: %s", self._error_message(response))
            return BackendResult.failed()

        body = response.content
        try:
            await asyncio.to_thread(atomic_write_bytes, job.cache_path, body)
        except OSError as exc:
            logger.error("Imaginary: Failed to write cache file %s: %s", job.cache_path, exc)
            return BackendResult.failed()

        size = self._header_dimensions(response)
        if size is None:
            size = await asyncio.to_thread(read_dimensions_from_bytes, body)
        if size is None:
            return BackendResult(success=True)
        return BackendResult(success=True, width=size[0], height=size[1])

    @staticmethod
    def _header_dimensions(response: httpx.Response) -> tuple[int, int] | None:
        try:
            width = int(response.headers["Image-Width"])
            height = int(response.headers["Image-Height"])
        except (KeyError, ValueError):
            return None
        return width, height

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return f"Failed to get resized image (status {response.status_code})"
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return str(payload)

    async def ping(self) -> bool:
        """Return ``True`` when the service health endpoint answers with 200."""

        health_url = self._url.rsplit("/", 1)[0] + "/health"
        response = await self._get_client().get(health_url)
        return response.status_code == 200

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        if self._client is not None:
            await self._client.aclose()
            self._client = None
