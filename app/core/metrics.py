"""Application metrics using the Prometheus client library.

All metrics are defined here so the inventory lives in one place; the
modules that own a behavior import the metric and increment it at the
point of action.

WHAT WE WATCH
---------------
  HTTP traffic     : request count/duration/in-flight, from the middleware.
  Reconciliation   : size of each merged catalog (a sudden drop means a
                      source is degrading to empty).
  Moderation       : approve/reject decisions actually persisted.
  Sync cache       : hit/miss/stale/invalidate.  A rising "stale" rate
                      means refetches are failing and users are looking at
                      old messages.
  Upstream failures: collaborator fetches that failed or timed out, by
                      source.  Reads absorb these, so without this counter
                      they would be invisible.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Catalog reads fan out to several sources, so the upper buckets
    # matter more here than for a single-query API.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Engine metrics
# ---------------------------------------------------------------------------

CATALOG_MERGE_RECORDS = Histogram(
    "catalog_merge_records",
    "Number of distinct course records produced by one merge",
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

MODERATION_DECISIONS = Counter(
    "moderation_decisions_total",
    "Moderation decisions persisted, by decision",
    ["decision"],  # "approved" or "rejected"
)

SYNC_CACHE_OPERATIONS = Counter(
    "sync_cache_operations_total",
    "Sync cache operations by result",
    ["operation"],  # "hit", "miss", "stale", "invalidate"
)

UPSTREAM_FAILURES = Counter(
    "upstream_failures_total",
    "Collaborator fetches that failed or timed out, by source",
    ["source"],  # "courses", "reviews", "instructor_lookup", "messages", ...
)
