from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tomatl.errors import InvalidSessionRequest


class Mode(Enum):
    FOCUS = "focus"
    REST = "rest"

    @classmethod
    def parse(cls, text: str) -> Mode:
        value = str(text).strip().lower()
        for mode in cls:
            if mode.value == value:
                return mode
        raise InvalidSessionRequest(f"Unknown mode: {text!r} (expected 'focus' or 'rest').")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SessionRequest:
    mode: Mode
    minutes: float

    def validate(self) -> None:
        if not isinstance(self.mode, Mode):
            raise InvalidSessionRequest(f"Unknown mode: {self.mode!r}.")
        try:
            minutes = float(self.minutes)
        except (TypeError, ValueError) as exc:
            raise InvalidSessionRequest(f"Minutes must be a number, got {self.minutes!r}.") from exc
        if not math.isfinite(minutes) or not math.isfinite(minutes * 60):
            raise InvalidSessionRequest("Minutes must be a finite number.")
        if minutes < 0:
            raise InvalidSessionRequest(f"Minutes must not be negative, got {minutes:g}.")

    @property
    def total_ticks(self) -> int:
        return int(round(float(self.minutes) * 60))


@dataclass(frozen=True)
class Session:
    """One completed focus/rest interval."""

    start_time: datetime
    duration_minutes: float
    mode: Mode

    def __post_init__(self) -> None:
        if self.start_time.tzinfo is None:
            raise ValueError("Session.start_time must be timezone-aware.")

    @property
    def start_iso(self) -> str:
        return self.start_time.isoformat()


@dataclass
class CountdownState:
    total_ticks: int
    elapsed_ticks: int = 0

    @property
    def remaining_ticks(self) -> int:
        return max(0, self.total_ticks - self.elapsed_ticks)

    @property
    def is_complete(self) -> bool:
        return self.elapsed_ticks >= self.total_ticks
