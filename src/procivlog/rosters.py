"""Vehicle/volunteer rosters and the sync target setting."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from urllib.parse import urlsplit

from procivlog._constants import PLATE_NOT_AVAILABLE
from procivlog._redact import redact_url
from procivlog.exceptions import ProcivValidationError
from procivlog.models.roster import Vehicle, Volunteer
from procivlog.models.sync import SyncSettings
from procivlog.normalize import clean_text, require_text
from procivlog.state.store import PersistentStore

_logger = logging.getLogger(__name__)


def _epoch_ms_id() -> str:
    return str(int(time.time() * 1000))


class RosterManager:
    """Add/remove operations on the reference rosters.

    Removing a vehicle or volunteer never touches trips that reference it;
    lookups fall back to placeholders instead.
    """

    def __init__(self, store: PersistentStore, *, id_factory: Callable[[], str] = _epoch_ms_id) -> None:
        self._store = store
        self._id_factory = id_factory

    def _unique_id(self, taken: set[str]) -> str:
        candidate = self._id_factory()
        while candidate in taken:
            candidate = str(int(candidate) + 1) if candidate.isdigit() else f"{candidate}_"
        return candidate

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    def vehicles(self) -> tuple[Vehicle, ...]:
        return self._store.vehicles()

    def add_vehicle(self, plate: str, model: str) -> Vehicle:
        vehicle = Vehicle(
            id=self._unique_id({v.id for v in self._store.vehicles()}),
            plate=require_text(plate, field="plate"),
            model=require_text(model, field="model"),
        )
        self._store.replace_vehicles([*self._store.vehicles(), vehicle])
        _logger.info("Added vehicle %s (%s)", vehicle.plate, vehicle.id)
        return vehicle

    def remove_vehicle(self, vehicle_id: str) -> bool:
        remaining = [v for v in self._store.vehicles() if v.id != vehicle_id]
        if len(remaining) == len(self._store.vehicles()):
            return False
        self._store.replace_vehicles(remaining)
        _logger.info("Removed vehicle %s", vehicle_id)
        return True

    def vehicle_plate(self, vehicle_id: str, default: str = PLATE_NOT_AVAILABLE) -> str:
        vehicle = self._store.find_vehicle(vehicle_id)
        return vehicle.plate if vehicle is not None else default

    def vehicle_label(self, vehicle_id: str, default: str = PLATE_NOT_AVAILABLE) -> str:
        vehicle = self._store.find_vehicle(vehicle_id)
        return vehicle.label if vehicle is not None else default

    # ------------------------------------------------------------------
    # Volunteers
    # ------------------------------------------------------------------

    def volunteers(self) -> tuple[Volunteer, ...]:
        return self._store.volunteers()

    def add_volunteer(self, name: str, surname: str) -> Volunteer:
        volunteer = Volunteer(
            id=self._unique_id({v.id for v in self._store.volunteers()}),
            name=require_text(name, field="name"),
            surname=require_text(surname, field="surname"),
        )
        self._store.replace_volunteers([*self._store.volunteers(), volunteer])
        _logger.info("Added volunteer %s", volunteer.id)
        return volunteer

    def remove_volunteer(self, volunteer_id: str) -> bool:
        remaining = [v for v in self._store.volunteers() if v.id != volunteer_id]
        if len(remaining) == len(self._store.volunteers()):
            return False
        self._store.replace_volunteers(remaining)
        _logger.info("Removed volunteer %s", volunteer_id)
        return True

    # ------------------------------------------------------------------
    # Sync target
    # ------------------------------------------------------------------

    def sync_settings(self) -> SyncSettings:
        return self._store.settings()

    def set_sink_url(self, url: str | None) -> SyncSettings:
        """Set the sink URL; an empty value disables syncing."""
        cleaned = clean_text(url)
        if cleaned:
            try:
                parts = urlsplit(cleaned)
            except ValueError as exc:
                raise ProcivValidationError(f"sink URL is malformed: {exc}", field="sink_url") from exc
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ProcivValidationError("sink URL must be an http(s) URL", field="sink_url")
        settings = self._store.settings().model_copy(update={"sink_url": cleaned})
        self._store.replace_settings(settings)
        _logger.info("Sync target set to %s", redact_url(cleaned) or "<none>")
        return settings
