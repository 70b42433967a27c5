from __future__ import annotations


class TomatlError(Exception):
    """Base class for errors raised by tomatl."""


class InvalidSessionRequest(TomatlError, ValueError):
    """Mode or duration rejected before any countdown starts."""


class CompletionError(TomatlError):
    """A completion side effect (notification, sound, persistence) failed."""


class NotificationError(CompletionError):
    pass


class SoundPlaybackError(CompletionError):
    pass


class SessionStoreError(CompletionError):
    """The session log could not be opened or written."""
