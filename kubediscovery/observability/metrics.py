"""Prometheus collectors for the discovery cache.

All collectors live on the default registry so an embedding process exposes
them alongside its own metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

refresh_total = Counter(
    "kubediscovery_refresh_total",
    "Discovery refresh attempts by outcome.",
    ["outcome"],
)

refresh_duration_seconds = Histogram(
    "kubediscovery_refresh_duration_seconds",
    "Time spent fetching and indexing the API catalog, failed attempts included.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

snapshot_group_versions = Gauge(
    "kubediscovery_snapshot_group_versions",
    "Group-versions in the published snapshot.",
)

snapshot_resources = Gauge(
    "kubediscovery_snapshot_resources",
    "Top-level resource types in the published snapshot.",
)

synced = Gauge(
    "kubediscovery_synced",
    "1 once a snapshot has been published, 0 before.",
)

last_success_timestamp_seconds = Gauge(
    "kubediscovery_last_success_timestamp_seconds",
    "Unix time at which the published snapshot's fetch started.",
)
