from __future__ import annotations

import io
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
from rich.console import Console

from conftest import FakeNotifier, FakePlayer, FakeStore, InstantTicker
import tomatl.app as app_mod
from tomatl.di.container import Container
from tomatl.domain.models import Mode, Session
from tomatl.errors import NotificationError, SessionStoreError, SoundPlaybackError
from tomatl.services.focus.session_store import SessionStore
from tomatl.services.notify import NullNotifier
from tomatl.services.sound import SilentPlayer


class ContainerSpy:
    """Container factory that injects fakes and remembers what it built."""

    def __init__(self, **overrides) -> None:
        self.overrides = overrides
        self.out = io.StringIO()
        self.built: list[Container] = []

    def __call__(self, config, **kwargs) -> Container:
        kwargs.update(self.overrides)
        kwargs.setdefault("ticker", InstantTicker())
        kwargs.setdefault("notifier", FakeNotifier())
        kwargs.setdefault("player", FakePlayer())
        container = Container(
            config, console=Console(file=self.out, force_terminal=False, width=120), **kwargs
        )
        self.built.append(container)
        return container

    @property
    def container(self) -> Container:
        return self.built[-1]


def _run(argv: list[str], spy: ContainerSpy, app_config) -> int:
    return app_mod.run_app(["tomatl", *argv], container_factory=spy, config=app_config)


def test_focus_one_minute_end_to_end(tmp_path: Path, app_config, capsys):
    db = tmp_path / "focus.db"
    spy = ContainerSpy()

    before = datetime.now(timezone.utc)
    code = _run(["focus", "1", "--db", str(db)], spy, app_config)
    after = datetime.now(timezone.utc)

    assert code == 0
    c = spy.container
    assert c.ticker.requested == [60]
    assert c.notifier.calls == [(Mode.FOCUS, "Your focus session is complete.")]
    assert len(c.player.calls) == 1

    with SessionStore(db) as store:
        rows = store.recent(5)
    assert len(rows) == 1
    assert rows[0].minutes == 1.0
    assert before <= datetime.fromisoformat(rows[0].start_iso) <= after

    out = spy.out.getvalue()
    assert "FOCUS" in out
    assert "Starting a focus session for 1 minutes" in out
    assert "Done!" in out
    assert "Recorded focus session" in out


def test_default_database_path_comes_from_config(app_config):
    spy = ContainerSpy()
    assert _run(["rest", "0.05", "--quiet"], spy, app_config) == 0
    assert spy.container.database_path == app_config.database_path()
    assert app_config.database_path().exists()


@pytest.mark.parametrize("minutes", ["-5", "0", "nan", "inf", "1e307"])
def test_invalid_minutes_exit_non_zero_without_side_effects(minutes, app_config, capsys):
    store = FakeStore()
    spy = ContainerSpy(store=store)

    code = _run(["rest", minutes], spy, app_config)

    assert code == app_mod.EXIT_USAGE
    assert spy.built == []
    assert store.initialized == 0
    assert "tomatl: error:" in capsys.readouterr().err


def test_non_numeric_minutes_is_a_usage_error(app_config, capsys):
    assert _run(["focus", "soon"], ContainerSpy(), app_config) == 2
    assert "invalid number of minutes" in capsys.readouterr().err


def test_unknown_mode_is_a_usage_error(app_config, capsys):
    assert _run(["nap", "5"], ContainerSpy(), app_config) == 2


def test_version_flag_exits_zero(app_config, capsys):
    assert _run(["--version"], ContainerSpy(), app_config) == 0
    assert "tomatl" in capsys.readouterr().out


def test_best_effort_failures_are_reported_but_exit_zero(tmp_path: Path, app_config, capsys):
    spy = ContainerSpy(
        notifier=FakeNotifier(error=NotificationError("notification daemon unavailable")),
        player=FakePlayer(error=SoundPlaybackError("no audio device")),
    )

    code = _run(["focus", "0.1", "--db", str(tmp_path / "f.db")], spy, app_config)

    assert code == 0
    err = capsys.readouterr().err
    assert "Could not show desktop notification: notification daemon unavailable" in err
    assert "Error playing sound: no audio device" in err
    with SessionStore(tmp_path / "f.db") as store:
        assert store.count() == 1


def test_append_failure_exits_non_zero_and_names_persistence(app_config, capsys):
    store = FakeStore(error=SessionStoreError("attempt to write a readonly database"))
    spy = ContainerSpy(store=store)

    code = _run(["focus", "0.05", "--quiet"], spy, app_config)

    assert code == app_mod.EXIT_FAILURE
    err = capsys.readouterr().err
    assert "Failed to persist session" in err
    assert "readonly database" in err
    assert len(spy.container.notifier.calls) == 1
    assert len(spy.container.player.calls) == 1
    assert store.closed


def _chmod_read_only(db: Path) -> None:
    db.chmod(0o444)


def _mark_write_version_read_only(db: Path) -> None:
    # header byte 18 is the file-format write version; SQLite opens anything above 2 read-only
    with db.open("r+b") as fh:
        fh.seek(18)
        fh.write(bytes([3]))


@pytest.mark.parametrize(
    "make_read_only",
    [
        pytest.param(
            _chmod_read_only,
            marks=pytest.mark.skipif(
                not hasattr(os, "geteuid") or os.geteuid() == 0,
                reason="file permissions do not bind root",
            ),
            id="chmod",
        ),
        pytest.param(_mark_write_version_read_only, id="write-version"),
    ],
)
def test_read_only_database_file_fails_persistence(
    make_read_only, tmp_path: Path, app_config, capsys
):
    db = tmp_path / "focus.db"
    SessionStore(db).initialize().close()
    make_read_only(db)
    spy = ContainerSpy()

    code = _run(["focus", "0.05", "--quiet", "--db", str(db)], spy, app_config)

    assert code == app_mod.EXIT_FAILURE
    err = capsys.readouterr().err
    assert "Failed to persist session" in err
    assert "readonly database" in err
    assert len(spy.container.notifier.calls) == 1
    assert len(spy.container.player.calls) == 1
    with SessionStore(db) as store:
        assert store.count() == 0


def test_unopenable_store_fails_before_countdown(tmp_path: Path, app_config, capsys):
    taken = tmp_path / "is_a_dir"
    taken.mkdir()
    spy = ContainerSpy()

    code = _run(["focus", "25", "--db", str(taken)], spy, app_config)

    assert code == app_mod.EXIT_FAILURE
    assert spy.container.ticker.requested == []
    assert spy.container.notifier.calls == []
    assert "Failed to open session store" in capsys.readouterr().err


def test_interrupted_run_records_nothing(tmp_path: Path, app_config, capsys):
    db = tmp_path / "focus.db"
    spy = ContainerSpy(ticker=InstantTicker(interrupt_after=30))

    code = _run(["focus", "1", "--db", str(db)], spy, app_config)

    assert code == app_mod.EXIT_INTERRUPTED
    assert spy.container.notifier.calls == []
    assert "nothing was recorded" in capsys.readouterr().err
    with SessionStore(db) as store:
        assert store.count() == 0


def test_interrupt_during_completion_sound_records_nothing(tmp_path: Path, app_config, capsys):
    db = tmp_path / "focus.db"
    spy = ContainerSpy(player=FakePlayer(error=KeyboardInterrupt()))

    code = _run(["rest", "0.05", "--quiet", "--db", str(db)], spy, app_config)

    assert code == app_mod.EXIT_INTERRUPTED
    assert len(spy.container.notifier.calls) == 1
    assert "nothing was recorded" in capsys.readouterr().err
    with SessionStore(db) as store:
        assert store.count() == 0


def test_no_sound_and_no_notify_flags_swap_in_silent_collaborators(tmp_path: Path, app_config):
    spy = ContainerSpy()
    spy.overrides = {"ticker": InstantTicker()}

    def factory(config, **kwargs):
        kwargs.update(spy.overrides)
        c = Container(config, console=Console(file=spy.out), **kwargs)
        spy.built.append(c)
        return c

    code = app_mod.run_app(
        ["tomatl", "rest", "0.05", "--no-sound", "--no-notify", "--quiet", "--db", str(tmp_path / "x.db")],
        container_factory=factory,
        config=app_config,
    )

    assert code == 0
    assert isinstance(spy.container.notifier, NullNotifier)
    assert isinstance(spy.container.player, SilentPlayer)
    assert spy.out.getvalue() == ""


def test_history_lists_recent_sessions(tmp_path: Path, app_config):
    db = tmp_path / "focus.db"
    with SessionStore(db) as store:
        for i, minutes in enumerate((25.0, 5.0, 50.0)):
            store.append(
                Session(
                    start_time=datetime(2026, 10, 19, 9 + i, 0, tzinfo=timezone.utc),
                    duration_minutes=minutes,
                    mode=Mode.FOCUS,
                )
            )
    spy = ContainerSpy()

    code = _run(["history", "--limit", "2", "--db", str(db)], spy, app_config)

    assert code == 0
    out = spy.out.getvalue()
    assert "Recent sessions" in out
    assert "2026-10-19T11:00:00+00:00" in out
    assert "2026-10-19T10:00:00+00:00" in out
    assert "2026-10-19T09:00:00+00:00" not in out
    assert "Showing 2 of 3 sessions" in out


def test_history_on_empty_store(tmp_path: Path, app_config):
    spy = ContainerSpy()
    assert _run(["history", "--db", str(tmp_path / "new.db")], spy, app_config) == 0
    assert "No sessions recorded yet." in spy.out.getvalue()


def test_main_delegates_to_run_app(monkeypatch):
    import tomatl.main as main_mod

    seen: list[list[str]] = []
    monkeypatch.setattr(main_mod, "run_app", lambda argv: seen.append(list(argv)) or 7)
    monkeypatch.setattr(main_mod.sys, "argv", ["tomatl", "history"])

    assert main_mod.main() == 7
    assert seen == [["tomatl", "history"]]
