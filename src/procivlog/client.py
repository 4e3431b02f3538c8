"""High-level async client for the trip log."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from procivlog._transport import HttpSinkTransport, SinkTransport
from procivlog.config import ProcivConfig
from procivlog.exceptions import ProcivError
from procivlog.lifecycle import TripLifecycleManager
from procivlog.models.roster import Vehicle, Volunteer
from procivlog.models.sync import SyncSettings
from procivlog.models.trip import MaintenanceFlag, Trip
from procivlog.rosters import RosterManager
from procivlog.state.inflight import InFlightRegistry
from procivlog.state.store import PersistentStore
from procivlog.sync import SyncDispatcher, SyncOutcome, SyncSummary

_logger = logging.getLogger(__name__)


class TripLogClient:
    """Async facade over the trip log, rosters and sink sync.

    Usage::

        async with TripLogClient(ProcivConfig.from_env()) as log:
            trip = log.start_trip("V1", "Vol1", "120.4", "Base")
            await log.end_trip(trip, "245.6")
            await log.sync_pending()
    """

    def __init__(
        self,
        config: ProcivConfig,
        *,
        store: PersistentStore | None = None,
        transport: SinkTransport | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._injected_store = store
        self._injected_transport = transport
        self._external_session = session is not None
        self._http_session = session
        self._store: PersistentStore | None = None
        self._rosters: RosterManager | None = None
        self._lifecycle: TripLifecycleManager | None = None
        self._dispatcher: SyncDispatcher | None = None
        self._auto_sync_tasks: set[asyncio.Task[SyncOutcome]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TripLogClient:
        store = self._injected_store
        if store is None:
            store = PersistentStore.open(self._config.data_path)
        transport = self._injected_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpSinkTransport(self._http_session)

        self._store = store
        self._rosters = RosterManager(store)
        self._lifecycle = TripLifecycleManager(store)
        self._dispatcher = SyncDispatcher(
            store,
            transport,
            inflight=InFlightRegistry(),
            release_delay=self._config.sync_release_delay,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.wait_for_auto_sync()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._dispatcher = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_started(self) -> tuple[PersistentStore, RosterManager, TripLifecycleManager, SyncDispatcher]:
        if self._store is None or self._rosters is None or self._lifecycle is None or self._dispatcher is None:
            raise ProcivError("Client not initialized. Use 'async with TripLogClient(...) as log:'")
        return self._store, self._rosters, self._lifecycle, self._dispatcher

    async def _delayed_sync(self, trip: Trip, delay: float) -> SyncOutcome:
        await asyncio.sleep(delay)
        _, _, _, dispatcher = self._require_started()
        return await dispatcher.sync_one(trip)

    def _schedule_auto_sync(self, trip: Trip) -> None:
        _logger.debug("Scheduling sync of %s in %.1fs", trip.id, self._config.auto_sync_delay)
        task = asyncio.get_running_loop().create_task(self._delayed_sync(trip, self._config.auto_sync_delay))
        self._auto_sync_tasks.add(task)
        task.add_done_callback(self._auto_sync_tasks.discard)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def store(self) -> PersistentStore:
        return self._require_started()[0]

    @property
    def rosters(self) -> RosterManager:
        return self._require_started()[1]

    @property
    def lifecycle(self) -> TripLifecycleManager:
        return self._require_started()[2]

    @property
    def dispatcher(self) -> SyncDispatcher:
        return self._require_started()[3]

    @property
    def active_trip(self) -> Trip | None:
        return self.lifecycle.active_trip

    @property
    def is_syncing(self) -> bool:
        return self.dispatcher.in_progress

    def trips(self) -> tuple[Trip, ...]:
        return self.lifecycle.trips()

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    def start_trip(
        self,
        vehicle_id: str,
        volunteer_id: str,
        start_km: Any,
        destination: str,
        reason: str = "",
        notes: str = "",
        refueling_done: bool = False,
    ) -> Trip:
        return self.lifecycle.start_trip(
            vehicle_id,
            volunteer_id,
            start_km,
            destination,
            reason=reason,
            notes=notes,
            refueling_done=refueling_done,
        )

    async def end_trip(
        self,
        trip: Trip | str,
        end_km: Any,
        refueling_done: bool = False,
        maintenance: MaintenanceFlag | Mapping[str, Any] | None = None,
        notes: str = "",
    ) -> Trip:
        """Close *trip* and, if a sink is configured, schedule its delivery.

        The store write completes before the sync is scheduled.
        """
        completed = self.lifecycle.end_trip(
            trip,
            end_km,
            refueling_done=refueling_done,
            maintenance=maintenance,
            notes=notes,
        )
        if self._config.auto_sync and self.store.settings().is_configured:
            self._schedule_auto_sync(completed)
        return completed

    async def sync_pending(self) -> SyncSummary:
        """Manual "send pending data": the only retry path for failed syncs."""
        return await self.dispatcher.sync_all_pending()

    async def wait_for_auto_sync(self) -> None:
        """Wait until every scheduled automatic sync has finished."""
        if not self._auto_sync_tasks:
            return
        results = await asyncio.gather(*self._auto_sync_tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                _logger.error("Automatic sync crashed: %r", result)

    # ------------------------------------------------------------------
    # Rosters and settings
    # ------------------------------------------------------------------

    def add_vehicle(self, plate: str, model: str) -> Vehicle:
        return self.rosters.add_vehicle(plate, model)

    def remove_vehicle(self, vehicle_id: str) -> bool:
        return self.rosters.remove_vehicle(vehicle_id)

    def add_volunteer(self, name: str, surname: str) -> Volunteer:
        return self.rosters.add_volunteer(name, surname)

    def remove_volunteer(self, volunteer_id: str) -> bool:
        return self.rosters.remove_volunteer(volunteer_id)

    def set_sink_url(self, url: str | None) -> SyncSettings:
        return self.rosters.set_sink_url(url)
