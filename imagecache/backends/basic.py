"""Last-resort resize backend using Pillow only."""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from typing import Any

from PIL import Image, UnidentifiedImageError

from imagecache.backends.base import PNG_COMPRESSION_LEVEL, BackendResult, ResizeJob
from imagecache.cache.storage import atomic_write_bytes
from imagecache.imgproc.dimensions import fit_dimensions
from imagecache.models import ImageEncoding

logger = logging.getLogger(__name__)

PILLOW_FORMATS = {
    "webp": "WEBP",
    "avif": "AVIF",
    "jpeg": "JPEG",
    "png": "PNG",
}

# Modes written as-is; everything else (CMYK, YCbCr, I;16, LA for JPEG, ...) is converted.
WRITABLE_MODES = {
    "WEBP": ("RGB", "RGBA"),
    "AVIF": ("RGB", "RGBA"),
    "JPEG": ("L", "RGB"),
    "PNG": ("1", "L", "LA", "P", "RGB", "RGBA"),
}


class BasicLibraryBackend:
    """Aspect-preserving resize and re-encode. EXIF orientation is left untouched."""

    name = "basic"

    async def resize(self, job: ResizeJob) -> BackendResult:
        logger.debug("Pillow: Trying to get resized image: %s", job.source_path)

        encoding = job.encoding.value if isinstance(job.encoding, ImageEncoding) else str(job.encoding)
        image_format = PILLOW_FORMATS.get(encoding)
        if image_format is None:
            logger.error("Pillow: Invalid file type: %s", encoding)
            return BackendResult.failed()

        try:
            width, height = await asyncio.to_thread(self._process, job, image_format)
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError, KeyError) as exc:
            logger.error("Pillow: Failed to resize image %s: %s", job.source_path, exc)
            return BackendResult.failed()

        return BackendResult(success=True, width=width, height=height)

    def _process(self, job: ResizeJob, image_format: str) -> tuple[int, int]:
        with Image.open(job.source_path) as img:
            size = fit_dimensions(img.width, img.height, job.width, job.height)
            resized = img.resize(size, Image.Resampling.BICUBIC)

        resized = self._writable(resized, image_format)

        buffer = BytesIO()
        resized.save(buffer, format=image_format, **self._save_options(image_format, job.quality))
        atomic_write_bytes(job.cache_path, buffer.getvalue())
        return resized.size

    @staticmethod
    def _writable(img: Image.Image, image_format: str) -> Image.Image:
        """Convert ``img`` to a mode the encoder for ``image_format`` accepts."""

        if img.mode in WRITABLE_MODES[image_format]:
            return img
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        if has_alpha and "RGBA" in WRITABLE_MODES[image_format]:
            return img.convert("RGBA")
        return img.convert("RGB")

    @staticmethod
    def _save_options(image_format: str, quality: int) -> dict[str, Any]:
        if image_format == "PNG":
            return {"compress_level": PNG_COMPRESSION_LEVEL}
        return {"quality": quality}

    async def close(self) -> None:
        return None
