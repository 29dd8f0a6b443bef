"""Shared fixtures: temporary roots with generated source images."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from imagecache.config.settings import Settings, get_settings

EXIF_ORIENTATION_TAG = 0x0112

MakeImage = Callable[..., Path]


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_image(tmp_path: Path) -> MakeImage:
    """Write an RGB image below ``tmp_path`` and return its absolute path."""

    def _make(
        relative: str,
        size: tuple[int, int] = (600, 400),
        *,
        image_format: str = "JPEG",
        orientation: int | None = None,
    ) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", size, (200, 30, 30))
        options = {}
        if orientation is not None:
            exif = Image.Exif()
            exif[EXIF_ORIENTATION_TAG] = orientation
            options["exif"] = exif
        img.save(path, format=image_format, **options)
        return path

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(root=str(tmp_path), converter="basic", site_url="https://example.test")
