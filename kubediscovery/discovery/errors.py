"""Error types raised by the discovery pipeline."""

from __future__ import annotations

from collections.abc import Mapping


class DiscoveryError(Exception):
    """Base class for discovery failures."""


class DiscoveryFetchError(DiscoveryError):
    """The discovery source could not enumerate the API surface.

    Transient: the refresh loop logs it and retries on the next tick.
    ``failed_groups`` maps each group-version that failed to the exception it
    raised, when the failure was partial.
    """

    def __init__(self, message: str, failed_groups: Mapping[str, BaseException] | None = None) -> None:
        super().__init__(message)
        self.failed_groups: dict[str, BaseException] = dict(failed_groups or {})


class DiscoveryContractError(DiscoveryError):
    """The discovery source returned data that violates its contract.

    Raised instead of publishing a corrupt snapshot; whether this is fatal is
    left to the process supervisor.
    """
