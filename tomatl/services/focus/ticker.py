from __future__ import annotations

import time
from collections.abc import Callable, Iterator


class Ticker:
    """Blocking one-tick-per-interval source.

    Deadlines are computed from the monotonic clock at the start of the run,
    so a late wake-up shortens the next sleep instead of pushing every
    following tick back.
    """

    def __init__(
        self,
        *,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive.")
        self._interval = interval
        self._sleep = sleep
        self._clock = clock

    @property
    def interval(self) -> float:
        return self._interval

    def ticks(self, total: int) -> Iterator[int]:
        if total < 0:
            raise ValueError(f"Tick count must not be negative, got {total}.")
        return self._run(total)

    def _run(self, total: int) -> Iterator[int]:
        deadline = self._clock()
        for n in range(1, total + 1):
            deadline += self._interval
            remaining = deadline - self._clock()
            if remaining > 0:
                self._sleep(remaining)
            yield n
