"""Core data structures for kubediscovery."""

from kubediscovery.models.config import DiscoveryConfig, KubeDiscoveryConfig, LogConfig
from kubediscovery.models.schema import (
    GroupResource,
    GroupVersion,
    GroupVersionKind,
    GroupVersionResource,
    InvalidGroupVersionError,
    parse_group_version,
)

__all__ = [
    "DiscoveryConfig",
    "GroupResource",
    "GroupVersion",
    "GroupVersionKind",
    "GroupVersionResource",
    "InvalidGroupVersionError",
    "KubeDiscoveryConfig",
    "LogConfig",
    "parse_group_version",
]
