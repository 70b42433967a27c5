from __future__ import annotations

from pathlib import Path

import pytest

from tomatl.domain.models import Mode, Session
from tomatl.services.config.app_config import AppConfig
from tomatl.services.focus.session_store import SessionStore


# --- Fakes for completion collaborators ---


class InstantTicker:
    """Yields ticks without sleeping; optionally raises after N ticks."""

    def __init__(self, *, interrupt_after: int | None = None) -> None:
        self.interrupt_after = interrupt_after
        self.requested: list[int] = []

    def ticks(self, total: int):
        self.requested.append(total)
        for n in range(1, total + 1):
            if self.interrupt_after is not None and n > self.interrupt_after:
                raise KeyboardInterrupt
            yield n


class RecordingReporter:
    def __init__(self, *, fail: bool = False) -> None:
        self.ticks: list[tuple[int, int]] = []
        self.finish_calls = 0
        self.closed = False
        self.fail = fail

    def accept_tick(self, current: int, total: int) -> None:
        self.ticks.append((current, total))
        if self.fail:
            raise RuntimeError("render chaos")

    def finish(self) -> None:
        self.finish_calls += 1
        if self.fail:
            raise RuntimeError("finish chaos")

    def close(self) -> None:
        self.closed = True


class FakeNotifier:
    def __init__(self, *, error: Exception | None = None, log: list[str] | None = None) -> None:
        self.calls: list[tuple[Mode, str]] = []
        self.error = error
        self.log = log

    def notify(self, mode: Mode, summary_text: str) -> None:
        if self.log is not None:
            self.log.append("notify")
        self.calls.append((mode, summary_text))
        if self.error:
            raise self.error


class FakePlayer:
    def __init__(self, *, error: Exception | None = None, log: list[str] | None = None) -> None:
        self.calls: list[bytes] = []
        self.error = error
        self.log = log

    def play(self, asset_bytes: bytes) -> None:
        if self.log is not None:
            self.log.append("sound")
        self.calls.append(asset_bytes)
        if self.error:
            raise self.error


class FakeStore:
    def __init__(self, *, error: Exception | None = None, log: list[str] | None = None) -> None:
        self.sessions: list[Session] = []
        self.error = error
        self.log = log
        self.initialized = 0
        self.closed = False

    def initialize(self) -> FakeStore:
        self.initialized += 1
        return self

    def append(self, session: Session) -> None:
        if self.log is not None:
            self.log.append("persist")
        if self.error:
            raise self.error
        self.sessions.append(session)

    def recent(self, limit: int = 20) -> list:
        return []

    def count(self) -> int:
        return len(self.sessions)

    def close(self) -> None:
        self.closed = True


class FakeIni:
    """Minimal IniConfigService-like fake backed by a dict."""

    def __init__(self, data: dict[str, dict[str, str]] | None = None) -> None:
        self._data = data or {}

    def get(self, section: str, key: str, default: str | None = None) -> str | None:
        return self._data.get(section, {}).get(key, default)

    def get_bool(self, section: str, key: str, default: bool | None = None) -> bool | None:
        raw = self.get(section, key)
        if raw is None:
            return default
        return raw.strip().lower() in {"1", "true", "yes", "on"}

    def as_dict(self) -> dict[str, dict[str, str]]:
        return self._data

    @property
    def loaded_from(self) -> Path | None:
        return None


# --- Fixtures ---


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "focus.db"


@pytest.fixture()
def store(db_path: Path):
    s = SessionStore(db_path).initialize()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(ini=FakeIni(), data_dir=tmp_path / "appdata")
