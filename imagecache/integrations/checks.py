"""Availability checks for the resize backends."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx
from PIL import features

from imagecache.backends.basic import PILLOW_FORMATS
from imagecache.backends.native import load_vips
from imagecache.backends.remote import RemoteResizeBackend
from imagecache.config.settings import Settings, get_settings

# Pillow feature names for encoders that are optional at build time.
_PILLOW_FEATURES = {"webp": "webp", "avif": "avif"}


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except (httpx.HTTPError, OSError) as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_remote_service(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IntegrationCheckResult:
    """Ping the imaginary health endpoint and return the result."""

    backend = RemoteResizeBackend(settings or get_settings(), transport=transport)

    async def _ping() -> bool:
        try:
            return await backend.ping()
        finally:
            await backend.close()

    return await _run_check(
        name="Imaginary",
        factory=_ping,
        success_message=f"Resize service at {backend.url} is reachable.",
    )


async def check_native_library() -> IntegrationCheckResult:
    """Report whether libvips can be loaded."""

    vips = await asyncio.to_thread(load_vips)
    if vips is None:
        return IntegrationCheckResult(name="libvips", success=False, message="pyvips or libvips is not installed.")
    version = ".".join(str(vips.version(part)) for part in range(3))
    return IntegrationCheckResult(name="libvips", success=True, message=f"libvips {version} loaded.")


async def check_basic_library() -> IntegrationCheckResult:
    """Report which target encodings Pillow can write."""

    missing = [
        encoding
        for encoding in PILLOW_FORMATS
        if encoding in _PILLOW_FEATURES and not features.check(_PILLOW_FEATURES[encoding])
    ]
    if missing:
        return IntegrationCheckResult(
            name="Pillow",
            success=False,
            message=f"Pillow lacks encoders for: {', '.join(missing)}.",
        )
    return IntegrationCheckResult(name="Pillow", success=True, message="Pillow supports all target encodings.")


async def run_all_checks(settings: Settings | None = None) -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(
        await asyncio.gather(
            check_remote_service(settings),
            check_native_library(),
            check_basic_library(),
        ),
    )
