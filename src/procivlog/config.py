"""Client configuration for procivlog."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from procivlog._constants import DEFAULT_AUTO_SYNC_DELAY, DEFAULT_SYNC_RELEASE_DELAY
from procivlog.exceptions import ProcivConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ProcivConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ProcivConfig:
    """Client configuration.

    Parameters
    ----------
    data_dir : str
        Directory holding the persisted partitions (one JSON file each).
        ``~`` is expanded.
    auto_sync : bool
        Attempt delivery to the sink automatically after a trip is closed.
    auto_sync_delay : float
        Seconds between committing a closed trip and the automatic sync
        attempt.
    sync_release_delay : float
        Seconds a trip id stays in the in-flight registry after a sync
        attempt finishes, suppressing near-simultaneous re-triggers.
    """

    data_dir: str = "~/.procivlog"
    auto_sync: bool = True
    auto_sync_delay: float = DEFAULT_AUTO_SYNC_DELAY
    sync_release_delay: float = DEFAULT_SYNC_RELEASE_DELAY

    def __post_init__(self) -> None:
        if self.auto_sync_delay < 0:
            raise ProcivConfigError("auto_sync_delay must be >= 0")
        if self.sync_release_delay < 0:
            raise ProcivConfigError("sync_release_delay must be >= 0")

    @property
    def data_path(self) -> Path:
        """Expanded :attr:`data_dir`."""
        return Path(self.data_dir).expanduser()

    @classmethod
    def from_env(cls, **overrides: Any) -> ProcivConfig:
        """Create configuration from ``PROCIV_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        data_dir = env.get("PROCIV_DATA_DIR")
        if data_dir:
            config_kwargs["data_dir"] = data_dir

        config_kwargs["auto_sync"] = _env_bool(env.get("PROCIV_AUTO_SYNC"), True)

        for env_key, field_name in (
            ("PROCIV_AUTO_SYNC_DELAY", "auto_sync_delay"),
            ("PROCIV_SYNC_RELEASE_DELAY", "sync_release_delay"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
