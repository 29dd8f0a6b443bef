"""Cache path, freshness and directory helpers."""

from .freshness import CacheFreshnessValidator
from .paths import CachePathResolver
from .provisioning import CacheDirectoryProvisioner
from .storage import atomic_write_bytes

__all__ = [
    "CacheDirectoryProvisioner",
    "CacheFreshnessValidator",
    "CachePathResolver",
    "atomic_write_bytes",
]
