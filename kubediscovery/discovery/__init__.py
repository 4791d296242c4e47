"""API discovery cache for kubediscovery.

Keeps an in-memory index of the cluster's API resource types, refreshed in
the background, so controllers can resolve ``apiVersion`` + resource or kind
without a round-trip to the API server.

Submodules:
    resource      -- Raw discovery records and the resolved APIResource descriptor.
    snapshot      -- Immutable per-refresh index and the builder that produces it.
    source        -- DiscoverySource protocol and the kubernetes-asyncio implementation.
    resource_map  -- ResourceMap: refresh loop, atomic publish, lookups.
    errors        -- DiscoveryError hierarchy.
"""

from __future__ import annotations

from typing import Any

from kubediscovery.discovery.errors import DiscoveryContractError, DiscoveryError, DiscoveryFetchError
from kubediscovery.discovery.resource import APIResource, APIResourceList, RawAPIResource
from kubediscovery.discovery.resource_map import LifecycleState, ResourceMap
from kubediscovery.discovery.snapshot import GroupVersionEntry, Snapshot, build_snapshot
from kubediscovery.discovery.source import DiscoverySource, KubernetesDiscoverySource
from kubediscovery.models.config import DiscoveryConfig

__all__ = [
    "APIResource",
    "APIResourceList",
    "DiscoveryContractError",
    "DiscoveryError",
    "DiscoveryFetchError",
    "DiscoverySource",
    "GroupVersionEntry",
    "KubernetesDiscoverySource",
    "LifecycleState",
    "RawAPIResource",
    "ResourceMap",
    "Snapshot",
    "build_resource_map",
    "build_snapshot",
]


def build_resource_map(config: DiscoveryConfig, api_client: Any) -> ResourceMap:
    """Build a ResourceMap that discovers through *api_client*.

    *api_client* is a ``kubernetes_asyncio.client.ApiClient``; the caller owns
    it and closes it after :meth:`ResourceMap.stop`.  Start the map with
    ``config.refresh_interval_seconds``.
    """
    source = KubernetesDiscoverySource(api_client, request_timeout=config.request_timeout_seconds)
    return ResourceMap(source, strict=config.strict_group_versions)
