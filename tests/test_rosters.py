from __future__ import annotations

import pytest

from procivlog._constants import PLATE_NOT_AVAILABLE
from procivlog.exceptions import ProcivValidationError
from procivlog.rosters import RosterManager
from procivlog.state.store import MemoryBackend, PersistentStore


def _rosters() -> tuple[RosterManager, PersistentStore]:
    store = PersistentStore(MemoryBackend())
    return RosterManager(store, id_factory=lambda: "1700000000000"), store


def test_add_vehicle_normalizes_plate_and_bumps_colliding_ids() -> None:
    rosters, store = _rosters()

    first = rosters.add_vehicle("ab 123 cd", "Fiat Ducato")
    second = rosters.add_vehicle("EF456GH", "Land Rover Defender")

    assert first.plate == "AB 123 CD"
    assert first.id == "1700000000000"
    assert second.id == "1700000000001"
    assert [v.id for v in store.vehicles()] == [first.id, second.id]


def test_add_vehicle_requires_plate_and_model() -> None:
    rosters, store = _rosters()
    with pytest.raises(ProcivValidationError):
        rosters.add_vehicle("", "Ducato")
    with pytest.raises(ProcivValidationError):
        rosters.add_vehicle("AB123CD", " ")
    assert store.vehicles() == ()


def test_removed_vehicle_falls_back_to_placeholder() -> None:
    rosters, _ = _rosters()
    vehicle = rosters.add_vehicle("AB123CD", "Ducato")

    assert rosters.vehicle_plate(vehicle.id) == "AB123CD"
    assert rosters.remove_vehicle(vehicle.id)
    assert not rosters.remove_vehicle(vehicle.id)
    assert rosters.vehicle_plate(vehicle.id) == PLATE_NOT_AVAILABLE
    assert rosters.vehicle_label(vehicle.id, default="?") == "?"


def test_volunteers_add_and_remove() -> None:
    rosters, store = _rosters()
    volunteer = rosters.add_volunteer(" Mario ", "Rossi")

    assert volunteer.full_name == "Mario Rossi"
    assert store.find_volunteer(volunteer.id) == volunteer
    assert rosters.remove_volunteer(volunteer.id)
    assert rosters.volunteers() == ()


def test_set_sink_url_validates_and_clears() -> None:
    rosters, store = _rosters()

    settings = rosters.set_sink_url(" https://script.google.com/macros/s/abc/exec ")
    assert settings.sink_url == "https://script.google.com/macros/s/abc/exec"
    assert store.settings().is_configured

    with pytest.raises(ProcivValidationError):
        rosters.set_sink_url("ftp://example.org")
    with pytest.raises(ProcivValidationError):
        rosters.set_sink_url("not a url")

    assert not rosters.set_sink_url("").is_configured
    assert not store.settings().is_configured


def test_set_sink_url_rejects_unparseable_host() -> None:
    rosters, store = _rosters()

    with pytest.raises(ProcivValidationError) as excinfo:
        rosters.set_sink_url("http://[::1")

    assert excinfo.value.field == "sink_url"
    assert not store.settings().is_configured
