from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from tomatl.domain.models import Mode, Session


class ITicker(Protocol):
    """Produce one tick per elapsed interval, numbered 1..total."""

    def ticks(self, total: int) -> Iterator[int]: ...


class IProgressReporter(Protocol):
    """Visual countdown. Must never raise into the tick loop."""

    def accept_tick(self, current: int, total: int) -> None: ...
    def finish(self) -> None: ...


class INotifier(Protocol):
    def notify(self, mode: Mode, summary_text: str) -> None: ...


class ISoundPlayer(Protocol):
    def play(self, asset_bytes: bytes) -> None: ...


class ISessionStore(Protocol):
    """Append-only log of completed sessions."""

    def initialize(self) -> ISessionStore: ...
    def append(self, session: Session) -> None: ...
    def recent(self, limit: int = 20) -> Sequence[Any]: ...
    def count(self) -> int: ...
    def close(self) -> None: ...


class IConfigService(Protocol):
    def get(self, section: str, key: str, default: str | None = None) -> str | None: ...
    def get_bool(self, section: str, key: str, default: bool | None = None) -> bool | None: ...
    def as_dict(self) -> Mapping[str, Mapping[str, str]]: ...

    @property
    def loaded_from(self) -> Path | None: ...
