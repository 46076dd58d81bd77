"""Shared pytest fixtures for filecached tests."""

import os
import time
from pathlib import Path

import pytest


class FakeClock:
    """Controllable wall clock in epoch seconds."""

    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def set_age(path: Path, seconds: float, now: float | None = None) -> None:
    """Backdate path's mtime so it is `seconds` old relative to now."""
    stamp = (time.time() if now is None else now) - seconds
    os.utime(path, (stamp, stamp))


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Directory for backing files (not created up front)."""
    return tmp_path / "cache"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(time.time())


@pytest.fixture
def temp_xdg_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point XDG_DATA_HOME and HOME at temporary directories."""
    data_dir = tmp_path / "data"
    home_dir = tmp_path / "home"
    data_dir.mkdir()
    home_dir.mkdir()

    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.setenv("HOME", str(home_dir))

    return {"data": data_dir, "home": home_dir}
