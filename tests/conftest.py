from __future__ import annotations

import pytest

from procivlog.models.roster import Vehicle, Volunteer
from procivlog.state.store import MemoryBackend, PersistentStore
from tests.fakes import FakeSink, ManualClock


@pytest.fixture
def store() -> PersistentStore:
    s = PersistentStore(MemoryBackend())
    s.replace_vehicles([Vehicle(id="V1", plate="ab123cd", model="Fiat Ducato")])
    s.replace_volunteers([Volunteer(id="Vol1", name="Mario", surname="Rossi")])
    return s


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
