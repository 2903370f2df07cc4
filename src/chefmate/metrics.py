"""Prometheus metrics definitions for ChefMate."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "chefmate_http_requests_total",
    "Total number of HTTP requests processed by the ChefMate API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "chefmate_http_request_duration_seconds",
    "Latency of HTTP requests processed by the ChefMate API",
    ["method", "path"],
)

CONSOLIDATED_ITEMS = Counter(
    "chefmate_shopping_items_consolidated_total",
    "Incoming shopping items by consolidation outcome",
    ["outcome"],
)

PERSISTENCE_FAILURES = Counter(
    "chefmate_persistence_failures_total",
    "User actions aborted because the persisted store failed",
    ["operation"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "CONSOLIDATED_ITEMS",
    "PERSISTENCE_FAILURES",
]
