"""Resize services."""

from .resizer import ResizeOrchestrator

__all__ = ["ResizeOrchestrator"]
