from __future__ import annotations

from pathlib import Path

import pytest

from procivlog.config import ProcivConfig
from procivlog.exceptions import ProcivConfigError


def test_defaults() -> None:
    config = ProcivConfig()
    assert config.auto_sync is True
    assert config.auto_sync_delay == 1.0
    assert config.sync_release_delay == 1.0
    assert config.data_path == Path("~/.procivlog").expanduser()


def test_from_env_reads_prociv_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROCIV_DATA_DIR", "/srv/prociv")
    monkeypatch.setenv("PROCIV_AUTO_SYNC", "off")
    monkeypatch.setenv("PROCIV_AUTO_SYNC_DELAY", "2.5")
    monkeypatch.setenv("PROCIV_SYNC_RELEASE_DELAY", "0")

    config = ProcivConfig.from_env()

    assert config.data_dir == "/srv/prociv"
    assert config.auto_sync is False
    assert config.auto_sync_delay == 2.5
    assert config.sync_release_delay == 0.0


def test_overrides_beat_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROCIV_AUTO_SYNC", "no")
    monkeypatch.setenv("PROCIV_AUTO_SYNC_DELAY", "9")

    config = ProcivConfig.from_env(auto_sync=True, auto_sync_delay=0.1)

    assert config.auto_sync is True
    assert config.auto_sync_delay == 0.1


def test_unparseable_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROCIV_AUTO_SYNC", "maybe")
    assert ProcivConfig.from_env().auto_sync is True


def test_invalid_delays_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ProcivConfigError):
        ProcivConfig(auto_sync_delay=-1)

    monkeypatch.setenv("PROCIV_SYNC_RELEASE_DELAY", "soon")
    with pytest.raises(ProcivConfigError, match="PROCIV_SYNC_RELEASE_DELAY"):
        ProcivConfig.from_env()
