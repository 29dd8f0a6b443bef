"""Resize backends and chain construction."""

from .base import BackendResult, ResizeBackend, ResizeJob
from .basic import BasicLibraryBackend
from .native import NativeLibraryBackend, load_vips
from .registry import ConfigurationError, build_backends, resolve_chain
from .remote import RemoteResizeBackend

__all__ = [
    "BackendResult",
    "BasicLibraryBackend",
    "ConfigurationError",
    "NativeLibraryBackend",
    "RemoteResizeBackend",
    "ResizeBackend",
    "ResizeJob",
    "build_backends",
    "load_vips",
    "resolve_chain",
]
