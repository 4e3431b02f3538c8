from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from procivlog.client import TripLogClient
from procivlog.config import ProcivConfig
from procivlog.exceptions import ActiveTripConflictError, ProcivError
from procivlog.models import TripStatus
from procivlog.state.store import MemoryBackend, PersistentStore
from tests.fakes import SINK_URL, FakeSink


def _config(tmp_path: Path, **overrides: object) -> ProcivConfig:
    values: dict[str, object] = {
        "data_dir": str(tmp_path),
        "auto_sync_delay": 0.01,
        "sync_release_delay": 0.01,
    }
    values.update(overrides)
    return ProcivConfig(**values)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_full_trip_is_synced_automatically_after_commit(tmp_path: Path, sink: FakeSink) -> None:
    observed_status: list[TripStatus] = []

    async with TripLogClient(_config(tmp_path), transport=sink) as log:
        vehicle = log.add_vehicle("ab123cd", "Fiat Ducato")
        volunteer = log.add_volunteer("Mario", "Rossi")
        log.set_sink_url(SINK_URL)
        sink.on_call = lambda _url, payload: observed_status.append(log.store.find_trip(payload["id"]).status)

        trip = log.start_trip(vehicle.id, volunteer.id, "120.4", "Base")
        assert log.active_trip == trip

        completed = await log.end_trip(trip, "245.6", maintenance={"needed": False})
        assert completed.synced is False
        assert log.active_trip is None

        await log.wait_for_auto_sync()

        assert log.store.find_trip(trip.id).synced is True  # type: ignore[union-attr]

    assert len(sink.calls) == 1
    assert sink.calls[0][1]["vehiclePlate"] == "AB123CD"
    assert sink.calls[0][1]["endKm"] == 246
    assert observed_status == [TripStatus.COMPLETED]

    # Reopen from disk: history and the synced flag survived.
    reopened = PersistentStore.open(tmp_path)
    assert reopened.find_trip(trip.id).synced is True  # type: ignore[union-attr]
    assert reopened.settings().sink_url == SINK_URL


@pytest.mark.asyncio
async def test_no_auto_sync_without_sink(tmp_path: Path, sink: FakeSink) -> None:
    async with TripLogClient(_config(tmp_path), transport=sink) as log:
        trip = log.start_trip("V1", "Vol1", 0, "Base")
        await log.end_trip(trip, 10)
        await log.wait_for_auto_sync()

        assert log.lifecycle.has_pending

    assert sink.calls == []


@pytest.mark.asyncio
async def test_auto_sync_disabled_by_config(tmp_path: Path, sink: FakeSink) -> None:
    async with TripLogClient(_config(tmp_path, auto_sync=False), transport=sink) as log:
        log.set_sink_url(SINK_URL)
        trip = log.start_trip("V1", "Vol1", 0, "Base")
        await log.end_trip(trip, 10)
        await log.wait_for_auto_sync()

        assert sink.calls == []

        summary = await log.sync_pending()

    assert summary.succeeded == 1
    assert len(sink.calls) == 1


@pytest.mark.asyncio
async def test_failed_auto_sync_is_retried_manually(sink: FakeSink) -> None:
    store = PersistentStore(MemoryBackend())
    sink.fail = True

    async with TripLogClient(_config(Path("unused")), store=store, transport=sink) as log:
        log.set_sink_url(SINK_URL)
        trip = log.start_trip("V1", "Vol1", 0, "Base")
        await log.end_trip(trip, 10)
        await log.wait_for_auto_sync()
        assert log.lifecycle.pending_trips()[0].id == trip.id

        sink.fail = False
        # Let the in-flight release delay pass before retrying.
        await asyncio.sleep(0.02)
        summary = await log.sync_pending()

        assert summary.succeeded == 1
        assert not log.lifecycle.has_pending
        assert log.is_syncing is False

    assert len(sink.calls) == 2


@pytest.mark.asyncio
async def test_single_active_trip_enforced_through_client(tmp_path: Path, sink: FakeSink) -> None:
    async with TripLogClient(_config(tmp_path), transport=sink) as log:
        log.start_trip("V1", "Vol1", 0, "A")
        with pytest.raises(ActiveTripConflictError):
            log.start_trip("V1", "Vol1", 0, "B")


def test_client_requires_context_manager(tmp_path: Path) -> None:
    log = TripLogClient(_config(tmp_path))
    with pytest.raises(ProcivError, match="not initialized"):
        log.start_trip("V1", "Vol1", 0, "Base")
