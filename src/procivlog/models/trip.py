"""Trip model."""

from __future__ import annotations

import secrets
import string
import time
from enum import StrEnum

from pydantic import Field

from procivlog.models._base import ProcivModel, UtcDatetime

_ID_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


def new_trip_id(now_ms: int | None = None) -> str:
    """Return ``T<epoch ms><5 base36 chars>``.

    Unique in practice for a single device; not cryptographically guaranteed.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_SUFFIX_ALPHABET) for _ in range(5))
    return f"T{now_ms}{suffix}"


class TripStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class MaintenanceFlag(ProcivModel):
    """Maintenance request recorded when a trip is closed."""

    needed: bool = False
    description: str = ""


class Trip(ProcivModel):
    """One vehicle outing, active or completed.

    ``driver_name`` is a snapshot taken at start; renaming or deleting the
    volunteer later does not change it.
    """

    id: str
    vehicle_id: str = ""
    volunteer_id: str = ""
    driver_name: str = ""
    start_km: int
    end_km: int | None = None
    destination: str = ""
    reason: str = ""
    notes: str = ""
    refueling_done: bool = False
    maintenance_needed: MaintenanceFlag = Field(default_factory=MaintenanceFlag)
    start_time: UtcDatetime
    end_time: UtcDatetime | None = None
    status: TripStatus = TripStatus.ACTIVE
    synced: bool = False

    @property
    def is_active(self) -> bool:
        return self.status == TripStatus.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status == TripStatus.COMPLETED

    @property
    def is_pending_sync(self) -> bool:
        """Completed but not yet forwarded to the sink."""
        return self.is_completed and not self.synced

    @property
    def distance_km(self) -> int | None:
        """``end_km - start_km``, or ``None`` while the trip is open.

        May be negative for historic records with inconsistent readings.
        """
        if self.end_km is None:
            return None
        return self.end_km - self.start_km

    @property
    def display_distance_km(self) -> int:
        """Distance for listings; a missing ``end_km`` counts as 0."""
        return (self.end_km or 0) - self.start_km
