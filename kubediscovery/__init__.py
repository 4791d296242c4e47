"""kubediscovery: a self-refreshing cache of a Kubernetes cluster's API surface."""

from kubediscovery.discovery import APIResource, ResourceMap, build_resource_map

__version__ = "0.1.0"

__all__ = ["APIResource", "ResourceMap", "__version__", "build_resource_map"]
