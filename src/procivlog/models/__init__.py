"""Data models for procivlog records."""

from procivlog.models._base import ProcivModel
from procivlog.models.roster import Vehicle, Volunteer
from procivlog.models.sync import SyncPayload, SyncSettings
from procivlog.models.trip import MaintenanceFlag, Trip, TripStatus, new_trip_id

__all__ = [
    "MaintenanceFlag",
    "ProcivModel",
    "SyncPayload",
    "SyncSettings",
    "Trip",
    "TripStatus",
    "Vehicle",
    "Volunteer",
    "new_trip_id",
]
