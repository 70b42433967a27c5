from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from tomatl.assets import COMPLETION_CHIME
from tomatl.domain.interfaces import (
    INotifier,
    IProgressReporter,
    ISessionStore,
    ISoundPlayer,
    ITicker,
)
from tomatl.domain.models import CountdownState, Session, SessionRequest

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETING = "completing"
    DONE = "done"
    ABORTED = "aborted"


class FailurePolicy(Enum):
    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class CompletionStep:
    name: str
    action: Callable[[Session], None]
    on_failure: FailurePolicy


@dataclass(frozen=True)
class StepOutcome:
    name: str
    ok: bool
    error: Exception | None = None
    skipped: bool = False


@dataclass
class RunReport:
    session: Session
    state: EngineState
    outcomes: list[StepOutcome] = field(default_factory=list)
    fatal: StepOutcome | None = None

    @property
    def ok(self) -> bool:
        return self.fatal is None

    def outcome(self, name: str) -> StepOutcome | None:
        for item in self.outcomes:
            if item.name == name:
                return item
        return None


def completion_summary(session: Session) -> str:
    return f"Your {session.mode.value} session is complete."


class SessionEngine(QObject):
    """Run one countdown, then the ordered completion plan."""

    state_changed = pyqtSignal(object)  # EngineState
    tick = pyqtSignal(int, int)  # current, total
    step_failed = pyqtSignal(str, str)  # step name, message
    session_recorded = pyqtSignal(object)  # Session

    def __init__(
        self,
        *,
        ticker: ITicker,
        reporter: IProgressReporter,
        notifier: INotifier,
        player: ISoundPlayer,
        store: ISessionStore,
        sound: bytes = COMPLETION_CHIME,
        now: Callable[[], datetime] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._ticker = ticker
        self._reporter = reporter
        self._notifier = notifier
        self._player = player
        self._store = store
        self._sound = sound
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._state = EngineState.IDLE
        self._countdown: CountdownState | None = None
        self._session: Session | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def countdown(self) -> CountdownState | None:
        return self._countdown

    @property
    def session(self) -> Session | None:
        return self._session

    def completion_plan(self) -> Sequence[CompletionStep]:
        """Side effects run after the final tick, in this order.

        Notification and sound are best-effort; persistence goes last so its
        failure is the final thing the user sees.
        """
        return (
            CompletionStep("notify", self._notify, FailurePolicy.CONTINUE),
            CompletionStep("sound", self._play_sound, FailurePolicy.CONTINUE),
            CompletionStep("persist", self._persist, FailurePolicy.ABORT),
        )

    def run(self, request: SessionRequest) -> RunReport:
        if self._state is not EngineState.IDLE:
            raise RuntimeError("Cannot start a session while the engine is not idle.")
        request.validate()

        session = Session(
            start_time=self._now(),
            duration_minutes=float(request.minutes),
            mode=request.mode,
        )
        self._session = session
        self._countdown = CountdownState(total_ticks=request.total_ticks)
        self._set_state(EngineState.RUNNING)
        logger.info(
            "Started %s session: %g min (%d ticks)",
            session.mode.value,
            session.duration_minutes,
            self._countdown.total_ticks,
        )

        try:
            self._count_down(self._countdown)
        except BaseException:
            self._set_state(EngineState.ABORTED)
            logger.info(
                "Session aborted after %d/%d ticks; nothing recorded",
                self._countdown.elapsed_ticks,
                self._countdown.total_ticks,
            )
            raise

        self._safe_finish()
        self._set_state(EngineState.COMPLETING)
        report = RunReport(session=session, state=EngineState.COMPLETING)
        try:
            for step in self.completion_plan():
                if report.fatal is not None:
                    report.outcomes.append(StepOutcome(step.name, ok=False, skipped=True))
                    continue
                outcome = self._attempt(step, session)
                report.outcomes.append(outcome)
                if not outcome.ok and step.on_failure is FailurePolicy.ABORT:
                    report.fatal = outcome
        except BaseException:
            # _attempt contains Exception only; an interrupt ends the run here
            self._set_state(EngineState.ABORTED)
            logger.info(
                "Completion interrupted after %s",
                ", ".join(o.name for o in report.outcomes) or "no steps",
            )
            raise

        self._set_state(EngineState.DONE)
        report.state = EngineState.DONE
        return report

    def reset(self) -> None:
        if self._state in (EngineState.RUNNING, EngineState.COMPLETING):
            raise RuntimeError("Cannot reset a session engine mid-run.")
        self._state = EngineState.IDLE
        self._countdown = None
        self._session = None

    def _count_down(self, countdown: CountdownState) -> None:
        total = countdown.total_ticks
        for current in self._ticker.ticks(total):
            countdown.elapsed_ticks = current
            try:
                self._reporter.accept_tick(current, total)
            except Exception:
                logger.debug("Progress reporter failed on tick %d", current, exc_info=True)
            self.tick.emit(current, total)

    def _safe_finish(self) -> None:
        try:
            self._reporter.finish()
        except Exception:
            logger.debug("Progress reporter failed to finish", exc_info=True)

    def _attempt(self, step: CompletionStep, session: Session) -> StepOutcome:
        try:
            step.action(session)
        except Exception as exc:
            level = logging.ERROR if step.on_failure is FailurePolicy.ABORT else logging.WARNING
            logger.log(level, "Completion step %r failed: %s", step.name, exc)
            self.step_failed.emit(step.name, str(exc))
            return StepOutcome(step.name, ok=False, error=exc)
        return StepOutcome(step.name, ok=True)

    def _notify(self, session: Session) -> None:
        self._notifier.notify(session.mode, completion_summary(session))

    def _play_sound(self, session: Session) -> None:
        self._player.play(self._sound)

    def _persist(self, session: Session) -> None:
        self._store.append(session)
        logger.info("Recorded %s session started at %s", session.mode.value, session.start_iso)
        self.session_recorded.emit(session)

    def _set_state(self, state: EngineState) -> None:
        self._state = state
        self.state_changed.emit(state)
