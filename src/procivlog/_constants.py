"""Shared constants for procivlog."""

from __future__ import annotations

#: Storage keys for the four persisted partitions.
TRIPS_KEY = "prociv_trips"
VEHICLES_KEY = "prociv_vehicles"
VOLUNTEERS_KEY = "prociv_volunteers"
SETTINGS_KEY = "prociv_settings"

#: Driver name recorded when the volunteer reference cannot be resolved.
UNKNOWN_DRIVER = "Sconosciuto"

#: Plate sent to the sink (and shown) when the vehicle reference is dangling.
PLATE_NOT_AVAILABLE = "N/D"

#: Seconds between committing a completed trip and its automatic sync attempt.
DEFAULT_AUTO_SYNC_DELAY = 1.0

#: Seconds a trip id stays in the in-flight registry after a sync attempt.
DEFAULT_SYNC_RELEASE_DELAY = 1.0

#: Number of completed trips shown in the "last missions" list.
RECENT_TRIPS_LIMIT = 5

USER_AGENT = "procivlog/1 (+aiohttp)"
