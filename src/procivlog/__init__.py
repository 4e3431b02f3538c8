"""procivlog - Trip log and spreadsheet sync for civil-protection vehicles."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("procivlog")
except PackageNotFoundError:
    __version__ = "0+local"
from procivlog._transport import HttpSinkTransport, SinkTransport
from procivlog.client import TripLogClient
from procivlog.config import ProcivConfig
from procivlog.exceptions import (
    ActiveTripConflictError,
    ProcivConfigError,
    ProcivError,
    ProcivStoreError,
    ProcivTransportError,
    ProcivValidationError,
    TripNotFoundError,
    TripStateError,
)
from procivlog.lifecycle import TripLifecycleManager
from procivlog.models import (
    MaintenanceFlag,
    SyncPayload,
    SyncSettings,
    Trip,
    TripStatus,
    Vehicle,
    Volunteer,
)
from procivlog.rosters import RosterManager
from procivlog.state import InFlightRegistry, JsonFileBackend, MemoryBackend, PersistentStore
from procivlog.sync import SyncDispatcher, SyncOutcome, SyncSummary

__all__ = [
    "__version__",
    "ActiveTripConflictError",
    "HttpSinkTransport",
    "InFlightRegistry",
    "JsonFileBackend",
    "MaintenanceFlag",
    "MemoryBackend",
    "PersistentStore",
    "ProcivConfig",
    "ProcivConfigError",
    "ProcivError",
    "ProcivStoreError",
    "ProcivTransportError",
    "ProcivValidationError",
    "RosterManager",
    "SinkTransport",
    "SyncDispatcher",
    "SyncOutcome",
    "SyncPayload",
    "SyncSettings",
    "SyncSummary",
    "Trip",
    "TripLifecycleManager",
    "TripLogClient",
    "TripNotFoundError",
    "TripStatus",
    "Vehicle",
    "Volunteer",
]
