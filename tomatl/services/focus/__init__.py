from .session_engine import (
    CompletionStep,
    EngineState,
    FailurePolicy,
    RunReport,
    SessionEngine,
    StepOutcome,
    completion_summary,
)
from .session_store import SessionRecord, SessionStore
from .ticker import Ticker

__all__ = [
    "CompletionStep",
    "EngineState",
    "FailurePolicy",
    "RunReport",
    "SessionEngine",
    "SessionRecord",
    "SessionStore",
    "StepOutcome",
    "Ticker",
    "completion_summary",
]
