"""Custom exception hierarchy for procivlog."""

from __future__ import annotations


class ProcivError(Exception):
    """Base exception for all procivlog errors."""


class ProcivConfigError(ProcivError):
    """Invalid or missing configuration."""


class ProcivValidationError(ProcivError, ValueError):
    """User-supplied input rejected before any store mutation."""

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class TripStateError(ProcivError):
    """Requested lifecycle transition is not allowed for the trip."""


class ActiveTripConflictError(TripStateError):
    """A trip is already active; only one may be in flight at a time."""

    def __init__(self, message: str, *, active_trip_id: str) -> None:
        self.active_trip_id = active_trip_id
        super().__init__(message)


class TripNotFoundError(TripStateError):
    """No trip with the given id exists in the trip log."""

    def __init__(self, message: str, *, trip_id: str) -> None:
        self.trip_id = trip_id
        super().__init__(message)


class ProcivStoreError(ProcivError):
    """A persisted partition could not be read or written."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class ProcivTransportError(ProcivError):
    """Network failure while delivering a trip to the sink.

    Raised by the transport; the sync dispatcher recovers from it by leaving
    the trip unsynced.
    """

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)
