from __future__ import annotations

import argparse
import logging
import math
from collections.abc import Callable, Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from tomatl import __version__
from tomatl.di.container import Container
from tomatl.domain.models import Mode, SessionRequest
from tomatl.errors import InvalidSessionRequest, SessionStoreError
from tomatl.logging_config import setup_logging
from tomatl.services.config.app_config import AppConfig, build_app_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

ContainerFactory = Callable[..., Container]

_STEP_LABELS = {
    "notify": "Could not show desktop notification",
    "sound": "Error playing sound",
}


def _minutes(text: str) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number of minutes: {text!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tomatl",
        description="Manage focus and rest sessions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=None, help="path to a config.ini file")
    common.add_argument("--db", type=Path, default=None, help="path to the session database")
    common.add_argument("-v", "--verbose", action="store_true", help="log debug details to stderr")

    sub = parser.add_subparsers(dest="command", metavar="{focus,rest,history}")
    sub.required = True
    for mode in Mode:
        p = sub.add_parser(mode.value, parents=[common], help=f"run a {mode.value} session")
        p.add_argument("minutes", type=_minutes, help="length of the session in minutes")
        p.add_argument("--quiet", action="store_true", help="hide the progress display")
        p.add_argument("--no-sound", action="store_true", help="skip the completion sound")
        p.add_argument("--no-notify", action="store_true", help="skip the desktop notification")

    history = sub.add_parser("history", parents=[common], help="list recorded sessions")
    history.add_argument("--limit", type=int, default=20, help="how many sessions to show")
    return parser


def run_app(
    argv: Sequence[str],
    *,
    container_factory: ContainerFactory = Container,
    config: AppConfig | None = None,
) -> int:
    """
    Parse the command line, compose collaborators via the DI container,
    and run one session (or print history). Returns the process exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(list(argv)[1:])
    except SystemExit as exc:
        # argparse exits on --help/--version and on usage errors
        return int(exc.code) if isinstance(exc.code, int) else EXIT_USAGE

    err = Console(stderr=True)
    config = config or build_app_config(explicit_ini=args.config)
    setup_logging(logging.DEBUG if args.verbose else config.log_level(), console=err)
    if config.loaded_from is not None:
        logger.debug("Loaded config from %s", config.loaded_from)

    if args.command == "history":
        container = container_factory(config, database_path=args.db)
        return _show_history(container, args.limit, err)

    mode = Mode.parse(args.command)
    request = SessionRequest(mode=mode, minutes=args.minutes)
    try:
        request.validate()
        if not request.minutes > 0:
            raise InvalidSessionRequest(f"Minutes must be positive, got {request.minutes:g}.")
    except InvalidSessionRequest as exc:
        err.print(f"tomatl: error: {escape(str(exc))}", soft_wrap=True)
        return EXIT_USAGE

    container = container_factory(
        config,
        database_path=args.db,
        notify=False if args.no_notify else None,
        sound=False if args.no_sound else None,
        quiet=args.quiet,
    )
    return _run_session(container, request, err)


def _run_session(container: Container, request: SessionRequest, err: Console) -> int:
    store = container.store
    try:
        store.initialize()
    except SessionStoreError as exc:
        logger.error("Session store unavailable: %s", exc)
        err.print(f"Failed to open session store: {escape(str(exc))}", soft_wrap=True)
        return EXIT_FAILURE

    try:
        if not container.quiet:
            _print_banner(container.console, request)
        reporter = container.build_reporter(request.total_ticks)
        engine = container.build_engine(reporter)

        def _on_step_failed(name: str, message: str) -> None:
            label = _STEP_LABELS.get(name)
            if label:
                err.print(f"{label}: {escape(message)}", soft_wrap=True)

        engine.step_failed.connect(_on_step_failed)
        try:
            report = engine.run(request)
        except KeyboardInterrupt:
            reporter.close()  # type: ignore[attr-defined]
            err.print("\nSession interrupted; nothing was recorded.")
            return EXIT_INTERRUPTED
    finally:
        store.close()

    if not report.ok:
        error = report.fatal.error if report.fatal else None
        err.print(f"Failed to persist session: {escape(str(error))}", soft_wrap=True)
        return EXIT_FAILURE

    if not container.quiet:
        container.console.print(
            f"Recorded {request.mode.value} session ({float(request.minutes):g} min)."
        )
    return EXIT_OK


def _print_banner(console: Console, request: SessionRequest) -> None:
    name = request.mode.value
    console.print()
    console.print(Rule(f"[bold cyan]{name.upper()}[/]", style="cyan"))
    console.print()
    console.print(
        f"[bold magenta]Starting a [green]{name}[/green] session for "
        f"{_fmt_minutes(request.minutes)} minutes ⏱️[/]\n"
    )


def _show_history(container: Container, limit: int, err: Console) -> int:
    store = container.store
    try:
        store.initialize()
        rows = store.recent(limit)
        total = store.count()
    except SessionStoreError as exc:
        err.print(f"Failed to read session history: {escape(str(exc))}", soft_wrap=True)
        return EXIT_FAILURE
    finally:
        store.close()

    if not rows:
        container.console.print("No sessions recorded yet.")
        return EXIT_OK

    table = Table(title="Recent sessions", caption=f"Showing {len(rows)} of {total} sessions")
    table.add_column("ID", justify="right")
    table.add_column("Started")
    table.add_column("Minutes", justify="right")
    for row in rows:
        table.add_row(str(row.id), row.start_iso, _fmt_minutes(row.minutes))
    container.console.print(table)
    return EXIT_OK


def _fmt_minutes(value: float) -> str:
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return f"{value:g}"
