"""Discovery sources: where the API catalog comes from.

:class:`DiscoverySource` is the only thing :class:`ResourceMap` depends on.
:class:`KubernetesDiscoverySource` implements it against a live API server
using kubernetes-asyncio, walking ``/api`` and ``/apis`` the same way
``kubectl api-resources`` does.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

from kubediscovery.discovery.errors import DiscoveryFetchError
from kubediscovery.discovery.resource import APIResourceList, RawAPIResource
from kubediscovery.observability.logging import get_logger

_CORE_VERSION = "v1"


class DiscoverySource(Protocol):
    """Enumerates every group-version the server offers and its resources."""

    async def server_groups_and_resources(self) -> list[APIResourceList]:
        """Return the full catalog, or raise on any failure."""
        ...


class KubernetesDiscoverySource:
    """Discovery against a Kubernetes API server.

    Every served version of every group is listed, not only the preferred one,
    so lookups by any valid ``apiVersion`` resolve.  Per-group requests run
    concurrently; if any of them fails the whole call raises
    :class:`DiscoveryFetchError` rather than returning a partial catalog.
    """

    def __init__(self, api_client: Any, request_timeout: float = 10.0) -> None:
        self._api_client = api_client
        self._request_timeout = request_timeout
        self._log = get_logger("discovery.source")

    async def server_groups_and_resources(self) -> list[APIResourceList]:
        group_versions = await self._server_group_versions()
        results = await asyncio.gather(
            *(self._server_resources(gv) for gv in group_versions),
            return_exceptions=True,
        )

        resource_lists: list[APIResourceList] = []
        failed: dict[str, BaseException] = {}
        for gv, result in zip(group_versions, results, strict=True):
            if isinstance(result, BaseException):
                failed[gv] = result
            elif result is not None:
                resource_lists.append(result)

        if failed:
            self._log.warning(
                "discovery_groups_failed",
                failed=sorted(failed),
                total=len(group_versions),
            )
            raise DiscoveryFetchError(
                f"unable to retrieve the complete list of server APIs: {len(failed)} group-version(s) failed",
                failed_groups=failed,
            )
        return resource_lists

    async def _server_group_versions(self) -> list[str]:
        """List core versions from ``/api`` followed by every group version from ``/apis``."""
        try:
            core = await k8s_client.CoreApi(self._api_client).get_api_versions(
                _request_timeout=self._request_timeout,
            )
            groups = await k8s_client.ApisApi(self._api_client).get_api_versions(
                _request_timeout=self._request_timeout,
            )
        except Exception as exc:
            raise DiscoveryFetchError(f"unable to retrieve the server API groups: {exc}") from exc

        group_versions = list(core.versions or [])
        for group in groups.groups or []:
            for version in group.versions or []:
                group_versions.append(version.group_version)
        return group_versions

    async def _server_resources(self, group_version: str) -> APIResourceList | None:
        group, sep, version = group_version.partition("/")
        if not sep:
            if group_version != _CORE_VERSION:
                # CoreV1Api only serves /api/v1; the API server has never shipped another core version.
                self._log.debug("discovery_core_version_ignored", group_version=group_version)
                return None
            result = await k8s_client.CoreV1Api(self._api_client).get_api_resources(
                _request_timeout=self._request_timeout,
            )
        else:
            result = await k8s_client.CustomObjectsApi(self._api_client).get_api_resources(
                group,
                version,
                _request_timeout=self._request_timeout,
            )
        return _to_resource_list(group_version, result)


def _to_resource_list(group_version: str, result: Any) -> APIResourceList:
    """Convert a ``V1APIResourceList`` model into plain discovery records."""
    return APIResourceList(
        group_version=getattr(result, "group_version", None) or group_version,
        resources=tuple(_to_raw_resource(item) for item in (getattr(result, "resources", None) or [])),
    )


def _to_raw_resource(item: Any) -> RawAPIResource:
    return RawAPIResource(
        name=item.name,
        kind=item.kind,
        group=getattr(item, "group", None) or "",
        version=getattr(item, "version", None) or "",
        namespaced=bool(getattr(item, "namespaced", False)),
        verbs=tuple(getattr(item, "verbs", None) or ()),
        short_names=tuple(getattr(item, "short_names", None) or ()),
        singular_name=getattr(item, "singular_name", None) or "",
        categories=tuple(getattr(item, "categories", None) or ()),
    )
