"""Library configuration loaded from environment variables or option mappings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CACHE_DIR = "images/hbnimages"
DEFAULT_CONVERTER = "basic"


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _as_flag(value: Any) -> bool:
    """Interpret integer-like option values the way the option files store them."""

    if isinstance(value, str):
        value = value.strip().lower()
        if value in ("", "0", "false", "no", "off"):
            return False
        if value in ("true", "yes", "on"):
            return True
        return int(value) != 0
    return bool(value)


@dataclass(frozen=True, slots=True)
class Settings:
    """Options consumed by the resize engine."""

    root: str = "."
    cache_dir: str = DEFAULT_CACHE_DIR
    converter: str = DEFAULT_CONVERTER
    strip_metadata: bool = False

    imaginary_host: str = "http://localhost"
    imaginary_port: int = 9000
    imaginary_path: str = ""
    site_url: str = "http://localhost"
    request_timeout: float = 30.0

    log_level: str = "INFO"

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @property
    def imaginary_url(self) -> str:
        """Base URL of the remote resize endpoint."""

        host = self.imaginary_host.rstrip("/")
        return f"{host}:{self.imaginary_port}{self.imaginary_path}/resize"

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **overrides: Any) -> "Settings":
        """
        Build settings from a flat option mapping.

        Accepts the option names used by the hosting application
        (``cacheDir``, ``converter``, ``stripmetadata``, ``imaginary_host``,
        ``imaginary_port``, ``imaginary_path``). Missing or ``None`` entries
        keep their defaults.
        """

        values: dict[str, Any] = {}
        if options.get("cacheDir"):
            values["cache_dir"] = str(options["cacheDir"]).strip("/")
        if options.get("converter"):
            values["converter"] = str(options["converter"])
        if options.get("stripmetadata") is not None:
            values["strip_metadata"] = _as_flag(options["stripmetadata"])
        if options.get("imaginary_host"):
            values["imaginary_host"] = str(options["imaginary_host"])
        if options.get("imaginary_port"):
            values["imaginary_port"] = int(options["imaginary_port"])
        if options.get("imaginary_path") is not None:
            values["imaginary_path"] = str(options["imaginary_path"])
        values.update(overrides)
        return cls(**values)


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        root=os.getenv("IMAGECACHE_ROOT", "."),
        cache_dir=os.getenv("IMAGECACHE_CACHE_DIR", DEFAULT_CACHE_DIR).strip("/"),
        converter=os.getenv("IMAGECACHE_CONVERTER", DEFAULT_CONVERTER),
        strip_metadata=_as_flag(os.getenv("IMAGECACHE_STRIP_METADATA", "0")),
        imaginary_host=os.getenv("IMAGECACHE_IMAGINARY_HOST", "http://localhost"),
        imaginary_port=int(os.getenv("IMAGECACHE_IMAGINARY_PORT", "9000")),
        imaginary_path=os.getenv("IMAGECACHE_IMAGINARY_PATH", ""),
        site_url=os.getenv("IMAGECACHE_SITE_URL", "http://localhost"),
        request_timeout=float(os.getenv("IMAGECACHE_REQUEST_TIMEOUT", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
