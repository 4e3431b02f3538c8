"""Durable key-value store for the trip log, rosters and sync settings.

Each partition is read whole on load and written whole on every change.
:class:`PersistentStore` is the only component that touches the backend;
everything above it works with frozen models.
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from procivlog._constants import SETTINGS_KEY, TRIPS_KEY, VEHICLES_KEY, VOLUNTEERS_KEY
from procivlog.exceptions import ProcivStoreError
from procivlog.models.roster import Vehicle, Volunteer
from procivlog.models.sync import SyncSettings
from procivlog.models.trip import Trip

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)


class StorageBackend(Protocol):
    """Whole-value key-value storage.

    ``read`` returns ``None`` for keys never written.
    """

    def read(self, key: str) -> Any | None:
        ...

    def write(self, key: str, value: Any) -> None:
        ...


class MemoryBackend:
    """Dict-backed backend; values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def read(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def write(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileBackend:
    """One JSON file per key under *directory*.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so a crash never leaves a half-written
    partition behind.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Any | None:
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ProcivStoreError(f"Cannot read {path}: {exc}", key=key) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProcivStoreError(f"Corrupt partition {path}: {exc}", key=key) from exc

    def write(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(value, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise ProcivStoreError(f"Cannot write {path}: {exc}", key=key) from exc


def _load_list(backend: StorageBackend, key: str, model: type[TModel]) -> tuple[TModel, ...]:
    raw = backend.read(key)
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ProcivStoreError(f"Partition {key} must hold a list, got {type(raw).__name__}", key=key)
    try:
        return tuple(model.model_validate(item) for item in raw)
    except ValidationError as exc:
        raise ProcivStoreError(f"Invalid record in partition {key}: {exc}", key=key) from exc


class PersistentStore:
    """Typed view over the four persisted partitions.

    The trip log is ordered most-recent-first. Reads return tuples of frozen
    models; every ``replace_*`` call writes the whole partition through to
    the backend before returning.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        self._trips: tuple[Trip, ...] = ()
        self._vehicles: tuple[Vehicle, ...] = ()
        self._volunteers: tuple[Volunteer, ...] = ()
        self._settings = SyncSettings()
        self.load()

    @classmethod
    def open(cls, directory: str | os.PathLike[str]) -> PersistentStore:
        """Open (or create) a JSON-file store under *directory*."""
        return cls(JsonFileBackend(directory))

    def load(self) -> None:
        """(Re)read every partition from the backend."""
        self._trips = _load_list(self._backend, TRIPS_KEY, Trip)
        self._vehicles = _load_list(self._backend, VEHICLES_KEY, Vehicle)
        self._volunteers = _load_list(self._backend, VOLUNTEERS_KEY, Volunteer)

        raw_settings = self._backend.read(SETTINGS_KEY)
        if raw_settings is None:
            self._settings = SyncSettings()
        else:
            try:
                self._settings = SyncSettings.model_validate(raw_settings)
            except ValidationError as exc:
                raise ProcivStoreError(f"Invalid sync settings: {exc}", key=SETTINGS_KEY) from exc

        _logger.debug(
            "Loaded %d trips, %d vehicles, %d volunteers",
            len(self._trips),
            len(self._vehicles),
            len(self._volunteers),
        )

    # ------------------------------------------------------------------
    # Trip log
    # ------------------------------------------------------------------

    def trips(self) -> tuple[Trip, ...]:
        return self._trips

    def replace_trips(self, trips: Iterable[Trip]) -> None:
        new_trips = tuple(trips)
        self._backend.write(TRIPS_KEY, [t.to_record() for t in new_trips])
        self._trips = new_trips

    def find_trip(self, trip_id: str) -> Trip | None:
        return next((t for t in self._trips if t.id == trip_id), None)

    # ------------------------------------------------------------------
    # Rosters
    # ------------------------------------------------------------------

    def vehicles(self) -> tuple[Vehicle, ...]:
        return self._vehicles

    def replace_vehicles(self, vehicles: Iterable[Vehicle]) -> None:
        new_vehicles = tuple(vehicles)
        self._backend.write(VEHICLES_KEY, [v.to_record() for v in new_vehicles])
        self._vehicles = new_vehicles

    def find_vehicle(self, vehicle_id: str) -> Vehicle | None:
        return next((v for v in self._vehicles if v.id == vehicle_id), None)

    def volunteers(self) -> tuple[Volunteer, ...]:
        return self._volunteers

    def replace_volunteers(self, volunteers: Iterable[Volunteer]) -> None:
        new_volunteers = tuple(volunteers)
        self._backend.write(VOLUNTEERS_KEY, [v.to_record() for v in new_volunteers])
        self._volunteers = new_volunteers

    def find_volunteer(self, volunteer_id: str) -> Volunteer | None:
        return next((v for v in self._volunteers if v.id == volunteer_id), None)

    # ------------------------------------------------------------------
    # Sync settings
    # ------------------------------------------------------------------

    def settings(self) -> SyncSettings:
        return self._settings

    def replace_settings(self, settings: SyncSettings) -> None:
        self._backend.write(SETTINGS_KEY, settings.to_record())
        self._settings = settings
