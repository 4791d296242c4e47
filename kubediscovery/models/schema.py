"""Group/version/kind/resource identifiers for Kubernetes API types.

The string forms follow the API server's conventions: the core group is the
empty string, so its group-version renders as just the version (``v1``), while
every other group renders as ``group/version`` (``apps/v1``).
"""

from __future__ import annotations

from dataclasses import dataclass


class InvalidGroupVersionError(ValueError):
    """Raised when a group-version string cannot be parsed."""

    def __init__(self, group_version: str, reason: str) -> None:
        super().__init__(f"invalid group/version {group_version!r}: {reason}")
        self.group_version = group_version
        self.reason = reason


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version, e.g. ``apps/v1``."""

    group: str
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(group=self.group, version=self.version, kind=kind)

    def with_resource(self, resource: str) -> GroupVersionResource:
        return GroupVersionResource(group=self.group, version=self.version, resource=resource)


@dataclass(frozen=True)
class GroupVersionKind:
    """Fully-qualified type name, e.g. ``apps/v1, Kind=Deployment``."""

    group: str
    version: str
    kind: str

    def group_version(self) -> GroupVersion:
        return GroupVersion(group=self.group, version=self.version)

    def __str__(self) -> str:
        return f"{self.group_version()}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersionResource:
    """Fully-qualified resource path, e.g. ``apps/v1, Resource=deployments``."""

    group: str
    version: str
    resource: str

    def group_version(self) -> GroupVersion:
        return GroupVersion(group=self.group, version=self.version)

    def group_resource(self) -> GroupResource:
        return GroupResource(group=self.group, resource=self.resource)

    def __str__(self) -> str:
        return f"{self.group_version()}, Resource={self.resource}"


@dataclass(frozen=True)
class GroupResource:
    """Version-independent resource name, rendered as ``deployments.apps``."""

    group: str
    resource: str

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"


def parse_group_version(group_version: str) -> GroupVersion:
    """Parse ``"v1"`` or ``"apps/v1"`` into a :class:`GroupVersion`.

    Unlike the API machinery parser this rejects an empty version (``""``,
    ``"/"`` or ``"apps/"``): every identifier derived from a published type must
    carry a version.

    Raises:
        InvalidGroupVersionError: if the string has more than one ``/`` or an
            empty version component.
    """
    parts = group_version.split("/")
    if len(parts) > 2:
        raise InvalidGroupVersionError(group_version, "expected at most one '/'")
    if len(parts) == 1:
        group, version = "", parts[0]
    else:
        group, version = parts
    if not version:
        raise InvalidGroupVersionError(group_version, "version is empty")
    if group_version != group_version.strip():
        raise InvalidGroupVersionError(group_version, "surrounding whitespace")
    return GroupVersion(group=group, version=version)
