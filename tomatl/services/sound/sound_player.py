from __future__ import annotations

import hashlib
import platform
import shutil
import subprocess
import tempfile
from pathlib import Path

from tomatl.domain.interfaces import ISoundPlayer
from tomatl.errors import SoundPlaybackError


class QtSoundPlayer(ISoundPlayer):
    """Play a WAV byte buffer via QtMultimedia, falling back to a system player."""

    SYSTEM_PLAYERS = {
        "Darwin": ("afplay",),
        "Linux": ("paplay", "aplay"),
    }

    def __init__(self, *, timeout_ms: int = 5000, cache_dir: Path | None = None) -> None:
        self._timeout_ms = timeout_ms
        self._cache_dir = cache_dir or Path(tempfile.gettempdir())

    def play(self, asset_bytes: bytes) -> None:
        if not asset_bytes:
            raise SoundPlaybackError("Nothing to play: empty sound buffer.")
        try:
            path = self._materialize(asset_bytes)
        except OSError as exc:
            raise SoundPlaybackError(f"Cannot stage sound file: {exc}") from exc
        if self._play_with_qt(path):
            return
        if self._play_with_system(path):
            return
        raise SoundPlaybackError("No audio output available to play the completion sound.")

    def _materialize(self, data: bytes) -> Path:
        digest = hashlib.sha1(data).hexdigest()[:12]
        out = self._cache_dir / f"tomatl_chime_{digest}.wav"
        if out.exists() and out.stat().st_size == len(data):
            return out
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
        return out

    def _play_with_qt(self, path: Path) -> bool:
        try:
            from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer, QUrl
            from PyQt6.QtMultimedia import QSoundEffect  # type: ignore
        except Exception:
            return False
        try:
            app = QCoreApplication.instance()
            if app is None:
                app = QCoreApplication([])
            effect = QSoundEffect()
            loop = QEventLoop()

            def _on_status() -> None:
                if effect.status() == QSoundEffect.Status.Error:
                    loop.quit()

            def _on_playing() -> None:
                if not effect.isPlaying():
                    loop.quit()

            effect.statusChanged.connect(_on_status)
            effect.playingChanged.connect(_on_playing)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(0.90)
            QTimer.singleShot(self._timeout_ms, loop.quit)
            effect.play()
            loop.exec()
            return effect.status() != QSoundEffect.Status.Error
        except Exception:
            return False

    def _play_with_system(self, path: Path) -> bool:
        for name in self.SYSTEM_PLAYERS.get(platform.system(), ()):
            exe = shutil.which(name)
            if not exe:
                continue
            try:
                subprocess.run(
                    [exe, str(path)],
                    check=True,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=self._timeout_ms / 1000,
                )
                return True
            except (OSError, subprocess.SubprocessError):
                continue
        return False


class SilentPlayer(ISoundPlayer):
    """No-op player for sound-disabled runs and tests."""

    def play(self, asset_bytes: bytes) -> None:
        return None
