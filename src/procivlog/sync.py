"""Best-effort forwarding of completed trips to the sink.

Delivery is at most once per attempt: an in-flight registry rejects a second
attempt for the same trip while the first is running (and for a short time
after), and a trip is marked synced only after the transport returned
without error. Failures are logged and left for a later manual retry.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from procivlog._constants import DEFAULT_SYNC_RELEASE_DELAY, PLATE_NOT_AVAILABLE
from procivlog._redact import redact_for_log, redact_url
from procivlog._transport import SinkTransport
from procivlog.exceptions import ProcivStoreError, ProcivTransportError
from procivlog.models.sync import SyncPayload
from procivlog.models.trip import Trip
from procivlog.normalize import round_half_up
from procivlog.state.inflight import InFlightRegistry
from procivlog.state.store import PersistentStore

_logger = logging.getLogger(__name__)


class SyncOutcome(enum.Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class SyncSummary:
    """Counts from one :meth:`SyncDispatcher.sync_all_pending` run."""

    succeeded: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.skipped + self.failed

    def record(self, outcome: SyncOutcome) -> None:
        if outcome is SyncOutcome.SUCCESS:
            self.succeeded += 1
        elif outcome is SyncOutcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


def build_payload(trip: Trip, store: PersistentStore) -> SyncPayload:
    """Flatten *trip* into the row shape the sink expects."""
    vehicle = store.find_vehicle(trip.vehicle_id)
    end_km = trip.end_km if trip.end_km is not None else trip.start_km
    return SyncPayload(
        id=trip.id,
        driver_name=trip.driver_name,
        vehicle_plate=vehicle.plate if vehicle is not None and vehicle.plate else PLATE_NOT_AVAILABLE,
        start_km=round_half_up(trip.start_km),
        end_km=round_half_up(end_km),
        destination=trip.destination,
        reason=trip.reason,
        refueling_done=trip.refueling_done,
        maintenance_needed=trip.maintenance_needed.needed,
        maintenance_desc=trip.maintenance_needed.description,
        notes=trip.notes,
    )


class SyncDispatcher:
    """Deliver completed, unsynced trips to the configured sink."""

    def __init__(
        self,
        store: PersistentStore,
        transport: SinkTransport,
        *,
        inflight: InFlightRegistry | None = None,
        release_delay: float = DEFAULT_SYNC_RELEASE_DELAY,
    ) -> None:
        self._store = store
        self._transport = transport
        self._inflight = inflight if inflight is not None else InFlightRegistry()
        self._release_delay = release_delay
        self._in_progress = False

    @property
    def inflight(self) -> InFlightRegistry:
        return self._inflight

    @property
    def in_progress(self) -> bool:
        """Whether :meth:`sync_all_pending` is currently running."""
        return self._in_progress

    def _skip_reason(self, trip: Trip) -> str | None:
        if not self._store.settings().is_configured:
            return "no sink configured"
        current = self._store.find_trip(trip.id) or trip
        if trip.synced or current.synced:
            return "already synced"
        if not current.is_completed:
            return "trip not completed"
        return None

    async def sync_one(self, trip: Trip) -> SyncOutcome:
        """Attempt one delivery of *trip*.

        Never raises for network or store-write failures; returns
        :attr:`SyncOutcome.FAILED` and leaves the trip unsynced instead.
        """
        reason = self._skip_reason(trip)
        if reason is not None:
            _logger.debug("Skipping sync of %s: %s", trip.id, reason)
            return SyncOutcome.SKIPPED
        # No await between the checks above and this acquire.
        if not self._inflight.try_acquire(trip.id):
            _logger.debug("Skipping sync of %s: already in flight", trip.id)
            return SyncOutcome.SKIPPED

        try:
            current = self._store.find_trip(trip.id) or trip
            payload = build_payload(current, self._store).to_record()
            url = self._store.settings().sink_url.strip()
            _logger.debug("Syncing %s to %s: %s", trip.id, redact_url(url), redact_for_log(payload))
            try:
                await self._transport.post_json(url, payload)
            except ProcivTransportError as exc:
                _logger.warning("Sync of trip %s failed: %s", trip.id, exc)
                return SyncOutcome.FAILED

            try:
                self._mark_synced(trip.id)
            except ProcivStoreError as exc:
                _logger.error("Trip %s was sent but could not be marked synced: %s", trip.id, exc)
                return SyncOutcome.FAILED
            _logger.info("Trip %s sent to sink", trip.id)
            return SyncOutcome.SUCCESS
        finally:
            self._inflight.release(trip.id, delay=self._release_delay)

    def _mark_synced(self, trip_id: str) -> None:
        trips = self._store.trips()
        if not any(t.id == trip_id for t in trips):
            _logger.warning("Trip %s vanished from the log during sync", trip_id)
            return
        self._store.replace_trips(t.model_copy(update={"synced": True}) if t.id == trip_id else t for t in trips)

    async def sync_all_pending(self) -> SyncSummary:
        """Sync every pending trip one after the other.

        The pending set is snapshotted at call time. A call made while a
        previous run is still going returns an empty summary.
        """
        summary = SyncSummary()
        if self._in_progress:
            _logger.debug("Bulk sync already running")
            return summary

        self._in_progress = True
        try:
            pending = [t for t in self._store.trips() if t.is_pending_sync]
            _logger.info("Sending %d pending trips", len(pending))
            for trip in pending:
                summary.record(await self.sync_one(trip))
        finally:
            self._in_progress = False

        _logger.info(
            "Bulk sync done: %d sent, %d skipped, %d failed",
            summary.succeeded,
            summary.skipped,
            summary.failed,
        )
        return summary
