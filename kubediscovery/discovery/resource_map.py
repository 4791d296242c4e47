"""Periodically refreshed map of the cluster's API resource types.

Refresh protocol
----------------
Each refresh fetches the full catalog from the discovery source with no lock
held, builds a brand-new :class:`Snapshot`, and publishes it by swapping a
single reference under ``_lock``.  Readers take the lock only to copy that
reference and then query the immutable snapshot outside it, so lookups never
wait on a fetch and never see a half-built index.

Refreshes are serialized by ``_refresh_lock``; the loop and direct callers
never have two fetches in flight.

A failed fetch leaves the current snapshot in place.  Stale discovery data is
preferred over an empty cache: a transient outage must not make known types
disappear.

Lifecycle
---------
IDLE     -- constructed, background loop not started.
RUNNING  -- background loop active; first refresh runs immediately on start.
STOPPED  -- loop exited; no further refreshes.
"""

from __future__ import annotations

import asyncio
import threading
import time
from datetime import UTC, datetime
from enum import StrEnum

from kubediscovery.discovery.errors import DiscoveryContractError
from kubediscovery.discovery.resource import APIResource
from kubediscovery.discovery.snapshot import Snapshot, build_snapshot
from kubediscovery.discovery.source import DiscoverySource
from kubediscovery.observability.logging import get_logger
from kubediscovery.observability.metrics import (
    last_success_timestamp_seconds,
    refresh_duration_seconds,
    refresh_total,
    snapshot_group_versions,
    snapshot_resources,
    synced,
)


class LifecycleState(StrEnum):
    """Background refresh loop state."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class ResourceMap:
    """Concurrent, self-refreshing index of API resource types.

    Lookups are synchronous and safe to call from any thread or coroutine.
    The refresh loop runs as an asyncio task on the loop that called
    :meth:`start`.

    Example::

        resources = ResourceMap(KubernetesDiscoverySource(api_client))
        await resources.start(30.0)
        await resources.wait_for_sync()
        deployments = resources.get("apps/v1", "deployments")
    """

    def __init__(self, source: DiscoverySource, *, strict: bool = True) -> None:
        self._source = source
        self._strict = strict
        self._log = get_logger("discovery.resource_map")

        # Guards only the snapshot reference, never its contents.
        self._lock = threading.Lock()
        self._snapshot: Snapshot | None = None

        self._state = LifecycleState.IDLE
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._stopped_event = asyncio.Event()
        self._synced_event = asyncio.Event()
        # Serializes refreshes so an older fetch never publishes over a newer one.
        self._refresh_lock = asyncio.Lock()
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Lookup surface
    # ------------------------------------------------------------------

    def get(self, api_version: str, resource: str) -> APIResource | None:
        """Resolve a resource name (``"deployments"``) within *api_version*.

        Returns None if the group-version or resource is unknown, including
        before the first successful refresh.  Subresource paths such as
        ``"deployments/status"`` never resolve; use :meth:`has_subresource`.
        """
        snapshot = self.snapshot()
        if snapshot is None:
            return None
        return snapshot.get(api_version, resource)

    def get_by_kind(self, api_version: str, kind: str) -> APIResource | None:
        """Resolve a kind (``"Deployment"``) within *api_version*."""
        snapshot = self.snapshot()
        if snapshot is None:
            return None
        return snapshot.get_by_kind(api_version, kind)

    @staticmethod
    def has_subresource(resource: APIResource | None, key: str) -> bool:
        """Whether *resource* exposes the subresource *key* (``"status"``, ``"scale"``)."""
        if resource is None:
            return False
        return resource.has_subresource(key)

    def snapshot(self) -> Snapshot | None:
        """Return the currently published snapshot, or None before the first sync."""
        with self._lock:
            return self._snapshot

    def is_synced(self) -> bool:
        """True once any refresh has published a snapshot.  Never reverts to False."""
        with self._lock:
            return self._snapshot is not None

    async def wait_for_sync(self, timeout: float | None = None) -> bool:
        """Block until the first snapshot is published.

        Returns False if *timeout* seconds pass first, or if the refresh loop
        stops before any refresh succeeded.
        """
        if self._synced_event.is_set():
            return True
        waiters = [
            asyncio.ensure_future(self._synced_event.wait()),
            asyncio.ensure_future(self._stopped_event.wait()),
        ]
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
        return self._synced_event.is_set()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def last_error(self) -> BaseException | None:
        """The error from the most recent failed refresh, cleared on success."""
        return self._last_error

    # ------------------------------------------------------------------
    # Refresh pipeline
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Fetch the catalog and publish a new snapshot.

        Concurrent calls, including the background loop, run one at a time
        in arrival order, so the last refresh to finish is the newest fetch.

        Returns:
            True if a new snapshot was published, False if the fetch failed
            and the previous snapshot was kept.

        Raises:
            DiscoveryContractError: the source returned a malformed
                group-version (strict mode only).  The previous snapshot is
                kept.
        """
        async with self._refresh_lock:
            self._log.debug("discovery_refresh_started")
            fetched_at = datetime.now(tz=UTC)
            started = time.monotonic()
            try:
                return await self._refresh_locked(fetched_at)
            finally:
                refresh_duration_seconds.observe(time.monotonic() - started)

    async def _refresh_locked(self, fetched_at: datetime) -> bool:
        try:
            groups = await self._source.server_groups_and_resources()
        except Exception as exc:
            self._last_error = exc
            refresh_total.labels(outcome="failure").inc()
            self._log.error("discovery_refresh_failed", error=str(exc), exc_info=True)
            return False

        try:
            snapshot = build_snapshot(groups, fetched_at=fetched_at, strict=self._strict)
        except DiscoveryContractError as exc:
            self._last_error = exc
            refresh_total.labels(outcome="contract_violation").inc()
            raise

        self._publish(snapshot)
        self._last_error = None
        refresh_total.labels(outcome="success").inc()
        return True

    def _publish(self, snapshot: Snapshot) -> None:
        """Replace the current snapshot reference."""
        with self._lock:
            self._snapshot = snapshot
        self._synced_event.set()

        resource_count = snapshot.resource_count
        snapshot_group_versions.set(len(snapshot.group_versions))
        snapshot_resources.set(resource_count)
        synced.set(1)
        last_success_timestamp_seconds.set(snapshot.fetched_at.timestamp())
        self._log.debug(
            "discovery_snapshot_published",
            group_versions=len(snapshot.group_versions),
            resources=resource_count,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, interval: float) -> None:
        """Start the background refresh loop, refreshing every *interval* seconds."""
        if self._state is not LifecycleState.IDLE:
            self._log.warning("discovery_start_ignored", state=self._state.value)
            return
        self._state = LifecycleState.RUNNING
        self._task = asyncio.create_task(self._run(interval), name="discovery-refresh")
        self._log.info("discovery_started", interval_seconds=interval)

    async def stop(self) -> None:
        """Stop the refresh loop and wait for it to exit.

        An in-flight fetch is allowed to finish; no refresh starts after this
        returns.
        """
        self._stop_event.set()
        if self._task is None:
            self._state = LifecycleState.STOPPED
            self._stopped_event.set()
            return
        await self._task
        self._log.info("discovery_stopped")

    async def _run(self, interval: float) -> None:
        loop = asyncio.get_running_loop()
        try:
            while not self._stop_event.is_set():
                started = loop.time()
                try:
                    await self.refresh()
                except DiscoveryContractError as exc:
                    self._log.critical("discovery_contract_violation", error=str(exc))
                except Exception:
                    self._log.exception("discovery_refresh_crashed")

                # Next tick is measured from the start of this refresh.
                remaining = max(0.0, interval - (loop.time() - started))
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=remaining)
                except TimeoutError:
                    pass
        finally:
            self._state = LifecycleState.STOPPED
            self._stopped_event.set()
