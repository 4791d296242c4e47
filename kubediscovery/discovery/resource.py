"""Discovery records and the resolved type descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field

from kubediscovery.models.schema import (
    GroupResource,
    GroupVersion,
    GroupVersionKind,
    GroupVersionResource,
    parse_group_version,
)


@dataclass(frozen=True)
class RawAPIResource:
    """One resource entry as returned by the discovery source.

    ``name`` contains a ``/`` for subresources (``deployments/status``).
    ``group`` and ``version`` are usually blank and inherited from the list.
    """

    name: str
    kind: str
    group: str = ""
    version: str = ""
    namespaced: bool = False
    verbs: tuple[str, ...] = ()
    short_names: tuple[str, ...] = ()
    singular_name: str = ""
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class APIResourceList:
    """All resources served under one group-version."""

    group_version: str
    resources: tuple[RawAPIResource, ...] = ()


@dataclass(frozen=True)
class APIResource:
    """A resolved, addressable API resource type.

    Instances are only built while indexing a discovery result, after the
    owning group-version string has been validated, so the derived identifier
    accessors never fail.
    """

    name: str
    kind: str
    group: str
    version: str
    api_version: str
    namespaced: bool = False
    verbs: tuple[str, ...] = ()
    short_names: tuple[str, ...] = ()
    singular_name: str = ""
    categories: tuple[str, ...] = ()
    subresources: frozenset[str] = field(default_factory=frozenset)

    def group_version(self) -> GroupVersion:
        return parse_group_version(self.api_version)

    def group_version_kind(self) -> GroupVersionKind:
        return self.group_version().with_kind(self.kind)

    def group_version_resource(self) -> GroupVersionResource:
        return self.group_version().with_resource(self.name)

    def group_resource(self) -> GroupResource:
        return GroupResource(group=self.group, resource=self.name)

    def has_subresource(self, key: str) -> bool:
        return key in self.subresources
