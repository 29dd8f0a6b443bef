"""Shared types every resize backend works with."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from imagecache.models import ImageEncoding

# PNG output always uses the strongest zlib level instead of the quality value.
PNG_COMPRESSION_LEVEL = 9


@dataclass(frozen=True, slots=True)
class ResizeJob:
    """Everything a backend needs to produce one derivative."""

    source_path: Path
    source_url: str
    cache_path: Path
    width: int
    height: int
    encoding: ImageEncoding
    quality: int
    strip_metadata: bool = False


@dataclass(frozen=True, slots=True)
class BackendResult:
    """Outcome of a single backend attempt."""

    success: bool
    width: int = 0
    height: int = 0

    @classmethod
    def failed(cls) -> "BackendResult":
        return cls(success=False)


@runtime_checkable
class ResizeBackend(Protocol):
    """Common capability of the remote, native and basic resizers."""

    name: str

    async def resize(self, job: ResizeJob) -> BackendResult:
        """Write the derivative described by ``job`` and report its size.

        Implementations never raise for resize failures; they log the problem
        and return ``BackendResult.failed()`` so the next backend can run.
        """

    async def close(self) -> None:
        """Release held resources."""
