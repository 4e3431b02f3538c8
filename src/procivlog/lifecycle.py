"""Trip lifecycle: the ACTIVE -> COMPLETED state machine.

:class:`TripLifecycleManager` is the only writer of trip records apart from
the sync dispatcher flipping ``synced``. All validation happens before the
store is touched, so a rejected call leaves the trip log unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from procivlog._constants import UNKNOWN_DRIVER
from procivlog.exceptions import (
    ActiveTripConflictError,
    ProcivValidationError,
    TripNotFoundError,
    TripStateError,
)
from procivlog.models.trip import MaintenanceFlag, Trip, TripStatus, new_trip_id
from procivlog.normalize import clean_text, normalize_km, require_text
from procivlog.state.store import PersistentStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _coerce_maintenance(value: MaintenanceFlag | Mapping[str, Any] | None) -> MaintenanceFlag:
    if value is None:
        return MaintenanceFlag()
    if isinstance(value, MaintenanceFlag):
        needed, description = value.needed, value.description
    else:
        needed = bool(value.get("needed", False))
        description = value.get("description", "")
    flag = MaintenanceFlag(needed=needed, description=clean_text(description))
    if flag.needed and not flag.description:
        raise ProcivValidationError(
            "maintenance description is required when maintenance is needed",
            field="maintenance_needed",
        )
    return flag


class TripLifecycleManager:
    """Start and end trips, enforcing a single active trip."""

    def __init__(
        self,
        store: PersistentStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = new_trip_id,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_trip(self) -> Trip | None:
        """The trip currently in ``ACTIVE`` state, if any."""
        return next((t for t in self._store.trips() if t.is_active), None)

    def trips(self) -> tuple[Trip, ...]:
        """Whole trip log, most recent first."""
        return self._store.trips()

    def completed_trips(self, limit: int | None = None) -> list[Trip]:
        completed = [t for t in self._store.trips() if t.is_completed]
        return completed if limit is None else completed[:limit]

    def pending_trips(self) -> list[Trip]:
        """Completed trips not yet forwarded to the sink."""
        return [t for t in self._store.trips() if t.is_pending_sync]

    @property
    def has_pending(self) -> bool:
        return any(t.is_pending_sync for t in self._store.trips())

    # ------------------------------------------------------------------
    # Transitions
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
        """Open a new trip and insert it at the head of the trip log.

        Raises
        ------
        ActiveTripConflictError
            If another trip is still active.
        ProcivValidationError
            If a required field is missing or ``start_km`` is malformed.
        """
        active = self.active_trip
        if active is not None:
            raise ActiveTripConflictError(
                f"Trip {active.id} is still active; end it before starting another",
                active_trip_id=active.id,
            )

        vehicle_id = require_text(vehicle_id, field="vehicle_id")
        km = normalize_km(start_km, field="start_km")
        destination = require_text(destination, field="destination")

        volunteer = self._store.find_volunteer(volunteer_id)
        driver_name = volunteer.full_name if volunteer is not None else UNKNOWN_DRIVER

        trip = Trip(
            id=self._id_factory(),
            vehicle_id=vehicle_id,
            volunteer_id=clean_text(volunteer_id),
            driver_name=driver_name,
            start_km=km,
            destination=destination,
            reason=clean_text(reason),
            notes=clean_text(notes),
            refueling_done=bool(refueling_done),
            maintenance_needed=MaintenanceFlag(),
            start_time=self._clock(),
            status=TripStatus.ACTIVE,
        )
        self._store.replace_trips([trip, *self._store.trips()])
        _logger.info("Started trip %s (vehicle %s, start %d km)", trip.id, vehicle_id, km)
        return trip

    def end_trip(
        self,
        trip: Trip | str,
        end_km: Any,
        refueling_done: bool = False,
        maintenance: MaintenanceFlag | Mapping[str, Any] | None = None,
        notes: str = "",
    ) -> Trip:
        """Close an active trip.

        Close-time ``refueling_done``, ``maintenance`` and ``notes`` replace
        whatever was recorded at start.

        Raises
        ------
        TripNotFoundError
            If the trip is not in the trip log.
        TripStateError
            If the trip is already completed.
        ProcivValidationError
            If ``end_km`` is malformed or below ``start_km``, or maintenance
            is flagged without a description.
        """
        trip_id = trip.id if isinstance(trip, Trip) else str(trip)
        current = self._store.find_trip(trip_id)
        if current is None:
            raise TripNotFoundError(f"Unknown trip {trip_id}", trip_id=trip_id)
        if not current.is_active:
            raise TripStateError(f"Trip {trip_id} is {current.status}, not {TripStatus.ACTIVE}")

        km = normalize_km(end_km, field="end_km")
        if km < current.start_km:
            raise ProcivValidationError(
                f"end_km ({km}) is lower than start_km ({current.start_km})",
                field="end_km",
            )
        flag = _coerce_maintenance(maintenance)

        completed = current.model_copy(
            update={
                "end_km": km,
                "end_time": self._clock(),
                "status": TripStatus.COMPLETED,
                "refueling_done": bool(refueling_done),
                "maintenance_needed": flag,
                "notes": clean_text(notes),
            }
        )
        self._store.replace_trips(completed if t.id == trip_id else t for t in self._store.trips())
        _logger.info("Ended trip %s (%d km travelled)", trip_id, completed.distance_km)
        return completed
