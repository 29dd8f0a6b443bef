"""On-demand resized derivatives of source images with a filesystem cache."""

from imagecache.config.settings import Settings, get_settings
from imagecache.models import ImageEncoding, ResizeOutcome, ResizeRequest, SourceImageRef
from imagecache.services.resizer import ResizeOrchestrator

__all__ = [
    "ImageEncoding",
    "ResizeOrchestrator",
    "ResizeOutcome",
    "ResizeRequest",
    "Settings",
    "SourceImageRef",
    "get_settings",
]
