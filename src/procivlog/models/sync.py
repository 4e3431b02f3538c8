"""Sync target settings and the flattened sink payload."""

from __future__ import annotations

from procivlog.models._base import ProcivModel


class SyncSettings(ProcivModel):
    """Where completed trips are forwarded."""

    sink_url: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.sink_url.strip())


class SyncPayload(ProcivModel):
    """Body POSTed to the sink for one completed trip.

    ``maintenance_needed`` and ``maintenance_desc`` flatten the trip's
    :class:`~procivlog.models.trip.MaintenanceFlag` into scalars, since the
    receiving spreadsheet appends one flat row per trip.
    """

    id: str
    driver_name: str
    vehicle_plate: str
    start_km: int
    end_km: int
    destination: str
    reason: str
    refueling_done: bool
    maintenance_needed: bool
    maintenance_desc: str
    notes: str
