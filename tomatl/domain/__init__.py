"""Domain layer: interfaces and simple models (dataclasses)."""

from .interfaces import (
    IConfigService,
    INotifier,
    IProgressReporter,
    ISessionStore,
    ISoundPlayer,
    ITicker,
)
from .models import CountdownState, Mode, Session, SessionRequest

__all__ = [
    "IConfigService",
    "INotifier",
    "IProgressReporter",
    "ISessionStore",
    "ISoundPlayer",
    "ITicker",
    "CountdownState",
    "Mode",
    "Session",
    "SessionRequest",
]
