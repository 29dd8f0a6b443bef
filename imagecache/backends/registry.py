"""Mapping from the configured converter name to an ordered backend chain."""

from __future__ import annotations

from typing import Callable

import httpx

from imagecache.config.settings import Settings

from .base import ResizeBackend
from .basic import BasicLibraryBackend
from .native import NativeLibraryBackend
from .remote import RemoteResizeBackend


class ConfigurationError(ValueError):
    """Raised when the configured converter cannot be mapped to backends."""


_ALIASES: dict[str, str] = {
    "remote": "remote",
    "imaginary": "remote",
    "native": "native",
    "vips": "native",
    "imagick": "native",
    "basic": "basic",
    "pillow": "basic",
    "joomla": "basic",
}

# Fallback order; a converter name starts the chain at its position.
_DEFAULT_ORDER: tuple[str, ...] = ("remote", "native", "basic")


def resolve_chain(converter: str) -> list[str]:
    """
    Return the ordered backend names for ``converter``.

    A single name selects that backend followed by every lower-fidelity one.
    A comma separated list is taken literally.
    """

    names = [name.strip().lower() for name in converter.split(",") if name.strip()]
    if not names:
        raise ConfigurationError("No converter configured")

    unknown = [name for name in names if name not in _ALIASES]
    if unknown:
        raise ConfigurationError(f"Unsupported converter: {', '.join(unknown)}")

    canonical = [_ALIASES[name] for name in names]
    if len(canonical) == 1:
        return list(_DEFAULT_ORDER[_DEFAULT_ORDER.index(canonical[0]):])
    return list(dict.fromkeys(canonical))


def build_backends(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ResizeBackend]:
    """Instantiate the backend chain configured in ``settings``."""

    factories: dict[str, Callable[[], ResizeBackend]] = {
        "remote": lambda: RemoteResizeBackend(settings, transport=transport),
        "native": NativeLibraryBackend,
        "basic": BasicLibraryBackend,
    }
    return [factories[name]() for name in resolve_chain(settings.converter)]
