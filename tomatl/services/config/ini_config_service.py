# tomatl/services/config/ini_config_service.py
from __future__ import annotations

import configparser
from pathlib import Path
from typing import Dict, Mapping, Optional

from platformdirs import user_config_dir

from tomatl.domain.interfaces import IConfigService


class IniConfigService(IConfigService):
    r"""
    INI-backed configuration reader.

    Load order (first hit wins):
      1. Explicit path provided at construction (``--config``)
      2. User config dir (e.g., ~/.config/tomatl/config.ini or %LOCALAPPDATA%\tomatl\config.ini)
      3. Project default at <repo>/config/config.ini  (optional)
    """

    DEFAULT_APP_DIR = "tomatl"
    DEFAULT_FILE = "config.ini"

    def __init__(self, explicit_path: Optional[Path] = None, project_root: Optional[Path] = None):
        self._parser = configparser.ConfigParser()
        self._loaded_from: Optional[Path] = None

        candidates: list[Path] = []
        if explicit_path:
            candidates.append(Path(explicit_path))
        candidates.append(Path(user_config_dir(self.DEFAULT_APP_DIR)) / self.DEFAULT_FILE)
        if project_root:
            candidates.append(project_root / "config" / self.DEFAULT_FILE)

        for path in candidates:
            try:
                if path.exists():
                    parser = configparser.ConfigParser()
                    with path.open("r", encoding="utf-8") as fh:
                        parser.read_file(fh)
                    self._parser = parser
                    self._loaded_from = path
                    break
            except (OSError, configparser.Error):
                # Malformed or unreadable file: try the next candidate, then defaults.
                continue

    # ----- IConfigService -----

    def get(self, section: str, key: str, default: Optional[str] = None) -> Optional[str]:
        if section not in self._parser:
            return default
        return self._parser[section].get(key, default)

    def get_bool(self, section: str, key: str, default: Optional[bool] = None) -> Optional[bool]:
        val = self.get(section, key, None)
        if val is None:
            return default
        truth = {"1", "true", "yes", "y", "on"}
        falsy = {"0", "false", "no", "n", "off"}
        s = val.strip().lower()
        if s in truth:
            return True
        if s in falsy:
            return False
        return default

    def as_dict(self) -> Mapping[str, Mapping[str, str]]:
        snap: Dict[str, Dict[str, str]] = {}
        for sect in self._parser.sections():
            snap[sect] = dict(self._parser[sect])
        return snap

    @property
    def loaded_from(self) -> Optional[Path]:
        """For diagnostics (`tomatl -v` logs where config came from)."""
        return self._loaded_from
