"""Resize backend built on libvips through pyvips."""

from __future__ import annotations

import asyncio
import importlib
import logging
from types import ModuleType
from typing import Any

from imagecache.backends.base import PNG_COMPRESSION_LEVEL, BackendResult, ResizeJob
from imagecache.cache.storage import atomic_write_bytes
from imagecache.imgproc.dimensions import fit_dimensions
from imagecache.imgproc.orientation import TOP_LEFT, OrientationNormalizer
from imagecache.models import ImageEncoding

logger = logging.getLogger(__name__)

ORIENTATION_FIELD = "orientation"


def load_vips() -> ModuleType | None:
    """Import pyvips, returning ``None`` when the binding or libvips itself is missing."""

    try:
        return importlib.import_module("pyvips")
    except (ImportError, OSError) as exc:
        logger.warning("Vips: library not available: %s", exc)
        return None


class NativeLibraryBackend:
    """High fidelity resizer: orientation correction, Lanczos scaling, metadata control."""

    name = "native"

    def __init__(self, vips: ModuleType | None = None) -> None:
        self._vips = vips
        self._loaded = vips is not None
        self._normalizer = OrientationNormalizer()

    def _library(self) -> ModuleType | None:
        if not self._loaded:
            self._vips = load_vips()
            self._loaded = True
        return self._vips

    @property
    def available(self) -> bool:
        return self._library() is not None

    async def resize(self, job: ResizeJob) -> BackendResult:
        logger.debug("Vips: Trying to get resized image: %s", job.source_path)

        vips = self._library()
        if vips is None:
            logger.warning("Vips: extension not loaded")
            return BackendResult.failed()

        try:
            width, height = await asyncio.to_thread(self._process, vips, job)
        except vips.Error as exc:
            logger.error("Vips: Failed to resize image %s: %s", job.source_path, exc)
            return BackendResult.failed()
        except (OSError, ValueError) as exc:
            logger.error("Vips: Failed to write cache file %s: %s", job.cache_path, exc)
            return BackendResult.failed()

        return BackendResult(success=True, width=width, height=height)

    def _process(self, vips: ModuleType, job: ResizeJob) -> tuple[int, int]:
        image = vips.Image.new_from_file(str(job.source_path)).copy_memory()

        code = image.get(ORIENTATION_FIELD) if image.get_typeof(ORIENTATION_FIELD) else None
        image = self._normalizer.normalize(image, code).copy()
        image.set_type(vips.GValue.gint_type, ORIENTATION_FIELD, TOP_LEFT)

        width, height = fit_dimensions(image.width, image.height, job.width, job.height)
        image = image.resize(
            width / image.width,
            vscale=height / image.height,
            kernel="lanczos3",
        )

        data = image.write_to_buffer(f".{job.encoding.value}", **self._save_options(job))
        atomic_write_bytes(job.cache_path, data)
        return image.width, image.height

    @staticmethod
    def _save_options(job: ResizeJob) -> dict[str, Any]:
        options: dict[str, Any] = {"strip": job.strip_metadata}
        if job.encoding is ImageEncoding.PNG:
            options["compression"] = PNG_COMPRESSION_LEVEL
        else:
            options["Q"] = job.quality
        return options

    async def close(self) -> None:
        return None
