from __future__ import annotations

from pathlib import Path

from rich.console import Console

from tomatl.assets import COMPLETION_CHIME
from tomatl.domain.interfaces import (
    INotifier,
    IProgressReporter,
    ISessionStore,
    ISoundPlayer,
    ITicker,
)
from tomatl.services.config.app_config import AppConfig, build_app_config
from tomatl.services.focus.session_engine import SessionEngine
from tomatl.services.focus.session_store import SessionStore
from tomatl.services.focus.ticker import Ticker
from tomatl.services.notify.desktop_notifier import DesktopNotifier, NullNotifier
from tomatl.services.sound.sound_player import QtSoundPlayer, SilentPlayer
from tomatl.services.ui.progress_reporter import NullProgressReporter, RichProgressReporter


class Container:
    """
    Lightweight DI container:
      - Builds default collaborators from AppConfig when not supplied
      - Lets tests swap any collaborator (ticker, notifier, player, store)
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        console: Console | None = None,
        ticker: ITicker | None = None,
        notifier: INotifier | None = None,
        player: ISoundPlayer | None = None,
        store: ISessionStore | None = None,
        database_path: Path | None = None,
        notify: bool | None = None,
        sound: bool | None = None,
        quiet: bool = False,
    ) -> None:
        self.config: AppConfig = config or build_app_config()
        self.console: Console = console or Console()
        self.quiet = quiet
        self.ticker: ITicker = ticker or Ticker()

        notify_on = self.config.notifications_enabled() if notify is None else notify
        sound_on = self.config.sound_enabled() if sound is None else sound
        self.notifier: INotifier = notifier or (DesktopNotifier() if notify_on else NullNotifier())
        self.player: ISoundPlayer = player or (QtSoundPlayer() if sound_on else SilentPlayer())

        self.database_path: Path = database_path or self.config.database_path()
        self.store: ISessionStore = store or SessionStore(self.database_path)

    # ---------- Factories ----------

    def build_reporter(self, total: int) -> IProgressReporter:
        if self.quiet:
            return NullProgressReporter()
        reporter = RichProgressReporter(console=self.console)
        reporter.start(total)
        return reporter

    def build_engine(self, reporter: IProgressReporter) -> SessionEngine:
        return SessionEngine(
            ticker=self.ticker,
            reporter=reporter,
            notifier=self.notifier,
            player=self.player,
            store=self.store,
            sound=COMPLETION_CHIME,
        )
