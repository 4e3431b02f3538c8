"""In-flight registry: per-key advisory lock with timed release.

A key is held from :meth:`InFlightRegistry.try_acquire` until its release
deadline has passed. Releasing with a delay keeps the key held a little
longer, so a re-trigger racing the same logical event is still rejected.
Expiry is evaluated lazily against an injected clock.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class InFlightRegistry:
    """Set of keys currently undergoing work, with delayed removal.

    Not thread-safe: callers run on a single event loop, and
    :meth:`try_acquire` does check-then-insert without yielding.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        # key -> release deadline; None while held without a scheduled release
        self._entries: dict[str, float | None] = {}

    def _prune(self) -> None:
        now = self._clock()
        expired = [key for key, deadline in self._entries.items() if deadline is not None and deadline <= now]
        for key in expired:
            del self._entries[key]

    def __contains__(self, key: object) -> bool:
        self._prune()
        return key in self._entries

    def __len__(self) -> int:
        self._prune()
        return len(self._entries)

    def keys(self) -> frozenset[str]:
        self._prune()
        return frozenset(self._entries)

    def try_acquire(self, key: str) -> bool:
        """Hold *key*; return ``False`` if it is already held."""
        self._prune()
        if key in self._entries:
            return False
        self._entries[key] = None
        return True

    def release(self, key: str, *, delay: float = 0.0) -> None:
        """Release *key* once *delay* seconds have elapsed."""
        if key not in self._entries:
            return
        if delay <= 0:
            del self._entries[key]
            return
        self._entries[key] = self._clock() + delay
