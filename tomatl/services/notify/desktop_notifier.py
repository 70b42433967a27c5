from __future__ import annotations

import platform
import shutil
import subprocess

from tomatl.domain.interfaces import INotifier
from tomatl.domain.models import Mode
from tomatl.errors import NotificationError

NOTIFICATION_TITLE = "Timer up!"


class DesktopNotifier(INotifier):
    """Post a desktop alert through the platform's notification command."""

    def __init__(self, *, title: str = NOTIFICATION_TITLE, timeout: float = 5.0) -> None:
        self._title = title
        self._timeout = timeout

    def notify(self, mode: Mode, summary_text: str) -> None:
        cmd = self._build_command(mode, summary_text)
        try:
            subprocess.run(
                cmd,
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self._timeout,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or b"").decode("utf-8", "replace").strip()
            raise NotificationError(
                f"{cmd[0]} exited with status {exc.returncode}" + (f": {detail}" if detail else "")
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise NotificationError(f"{cmd[0]} timed out after {self._timeout:g}s") from exc
        except OSError as exc:
            raise NotificationError(f"Cannot run {cmd[0]}: {exc}") from exc

    def _build_command(self, mode: Mode, summary_text: str) -> list[str]:
        system = platform.system()
        if system == "Darwin":
            osascript = shutil.which("osascript")
            if osascript:
                script = (
                    f"display notification {_applescript_str(summary_text)} "
                    f"with title {_applescript_str(self._title)} "
                    f"subtitle {_applescript_str(mode.value.capitalize())}"
                )
                return [osascript, "-e", script]
        elif system in {"Linux", "FreeBSD", "OpenBSD", "NetBSD"}:
            notify_send = shutil.which("notify-send")
            if notify_send:
                return [notify_send, "-a", "tomatl", "-u", "normal", self._title, summary_text]
        raise NotificationError(f"No desktop notification backend available on {system or 'this platform'}.")


class NullNotifier(INotifier):
    """Used when notifications are switched off."""

    def notify(self, mode: Mode, summary_text: str) -> None:
        return None


def _applescript_str(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
