"""Persistence and shared sync state."""

from procivlog.state.inflight import InFlightRegistry
from procivlog.state.store import JsonFileBackend, MemoryBackend, PersistentStore, StorageBackend

__all__ = [
    "InFlightRegistry",
    "JsonFileBackend",
    "MemoryBackend",
    "PersistentStore",
    "StorageBackend",
]
