"""Immutable, denormalized index of one discovery result.

A :class:`Snapshot` is built in full from a single fetch and never mutated
afterwards, so readers holding a reference can traverse it without locking.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from kubediscovery.discovery.errors import DiscoveryContractError
from kubediscovery.discovery.resource import APIResource, APIResourceList, RawAPIResource
from kubediscovery.models.schema import GroupVersion, InvalidGroupVersionError, parse_group_version
from kubediscovery.observability.logging import get_logger

_log = get_logger("discovery.snapshot")

_SUBRESOURCE_SEPARATOR = "/"


@dataclass(frozen=True)
class GroupVersionEntry:
    """Resources of one group-version, indexed by name, kind and subresource path."""

    resources: Mapping[str, APIResource]
    kinds: Mapping[str, APIResource]
    subresources: Mapping[str, APIResource]


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of the cluster's API surface.

    ``fetched_at`` is when the fetch that produced this snapshot started.
    """

    group_versions: Mapping[str, GroupVersionEntry]
    fetched_at: datetime

    def get(self, api_version: str, resource: str) -> APIResource | None:
        entry = self.group_versions.get(api_version)
        if entry is None:
            return None
        return entry.resources.get(resource)

    def get_by_kind(self, api_version: str, kind: str) -> APIResource | None:
        entry = self.group_versions.get(api_version)
        if entry is None:
            return None
        return entry.kinds.get(kind)

    @property
    def resource_count(self) -> int:
        return sum(len(entry.resources) for entry in self.group_versions.values())


def build_snapshot(
    groups: Iterable[APIResourceList],
    *,
    fetched_at: datetime,
    strict: bool = True,
) -> Snapshot:
    """Denormalize a discovery result into a new :class:`Snapshot`.

    Args:
        groups: The resource lists returned by the discovery source.
        fetched_at: When the fetch started.
        strict: If True a malformed group-version string aborts the build with
            :class:`DiscoveryContractError`; otherwise that group is logged and
            left out of the snapshot.

    Raises:
        DiscoveryContractError: on a malformed group-version in strict mode.
    """
    group_versions: dict[str, GroupVersionEntry] = {}
    for group in groups:
        try:
            gv = parse_group_version(group.group_version)
        except InvalidGroupVersionError as exc:
            if strict:
                raise DiscoveryContractError(f"discovery returned an invalid group/version: {exc}") from exc
            _log.warning(
                "discovery_group_version_skipped",
                group_version=group.group_version,
                error=str(exc),
            )
            continue
        group_versions[group.group_version] = _build_entry(group, gv)

    return Snapshot(group_versions=MappingProxyType(group_versions), fetched_at=fetched_at)


def _build_entry(group: APIResourceList, gv: GroupVersion) -> GroupVersionEntry:
    resources: dict[str, APIResource] = {}
    subresources: dict[str, APIResource] = {}
    for raw in group.resources:
        resource = _resolve(raw, gv, group.group_version)
        if _SUBRESOURCE_SEPARATOR in raw.name:
            subresources[raw.name] = resource
        else:
            resources[raw.name] = resource

    # Fold each "resource/subresource" key into its owner's subresource set.
    subresource_keys: dict[str, set[str]] = {}
    for path in subresources:
        owner, _, key = path.partition(_SUBRESOURCE_SEPARATOR)
        if owner not in resources:
            _log.debug("discovery_orphan_subresource", group_version=group.group_version, subresource=path)
            continue
        subresource_keys.setdefault(owner, set()).add(key)
    for owner, keys in subresource_keys.items():
        resources[owner] = dataclasses.replace(resources[owner], subresources=frozenset(keys))

    kinds = {resource.kind: resource for resource in resources.values()}
    return GroupVersionEntry(
        resources=MappingProxyType(resources),
        kinds=MappingProxyType(kinds),
        subresources=MappingProxyType(subresources),
    )


def _resolve(raw: RawAPIResource, gv: GroupVersion, api_version: str) -> APIResource:
    """Build a descriptor, inheriting a blank group or version from the list."""
    return APIResource(
        name=raw.name,
        kind=raw.kind,
        group=raw.group or gv.group,
        version=raw.version or gv.version,
        api_version=api_version,
        namespaced=raw.namespaced,
        verbs=tuple(raw.verbs),
        short_names=tuple(raw.short_names),
        singular_name=raw.singular_name,
        categories=tuple(raw.categories),
    )
