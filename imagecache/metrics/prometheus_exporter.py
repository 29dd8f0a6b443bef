"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter


resize_requests_total = Counter(
    "imagecache_requests_total",
    "Total number of resize requests by outcome.",
    ["outcome"],
)

backend_attempts_total = Counter(
    "imagecache_backend_attempts_total",
    "Total number of resize attempts per backend.",
    ["backend", "result"],
)
