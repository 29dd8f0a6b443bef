"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_basic_library,
    check_native_library,
    check_remote_service,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_basic_library",
    "check_native_library",
    "check_remote_service",
    "run_all_checks",
]
