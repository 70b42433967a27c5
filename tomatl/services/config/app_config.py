from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir

from tomatl.domain.interfaces import IConfigService
from tomatl.services.config.ini_config_service import IniConfigService

DEFAULT_DB_NAME = "focus.db"
DEFAULT_LOG_LEVEL = "WARNING"


def _project_root_fallback() -> Path:
    # app_config.py -> tomatl/services/config/app_config.py
    return Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class AppConfig:
    """
    Typed view over the INI settings tomatl understands:

      [store]       database = <path to sqlite file>
      [completion]  notify = yes|no, sound = yes|no
      [logging]     level = DEBUG|INFO|WARNING|ERROR
    """

    ini: IConfigService
    data_dir: Path

    def database_path(self) -> Path:
        raw = (self.ini.get("store", "database", "") or "").strip()
        if raw:
            return Path(raw).expanduser()
        return self.data_dir / DEFAULT_DB_NAME

    def notifications_enabled(self) -> bool:
        return bool(self.ini.get_bool("completion", "notify", True))

    def sound_enabled(self) -> bool:
        return bool(self.ini.get_bool("completion", "sound", True))

    def log_level(self) -> int:
        name = (self.ini.get("logging", "level", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).strip().upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.WARNING

    def as_dict(self) -> Mapping[str, Mapping[str, str]]:
        return self.ini.as_dict()

    @property
    def loaded_from(self) -> Path | None:
        return self.ini.loaded_from


def build_app_config(
    *,
    explicit_ini: Path | None = None,
    project_root: Path | None = None,
    data_dir: Path | None = None,
) -> AppConfig:
    root = project_root or _project_root_fallback()
    ini = IniConfigService(explicit_path=explicit_ini, project_root=root)
    return AppConfig(ini=ini, data_dir=data_dir or Path(user_data_dir(IniConfigService.DEFAULT_APP_DIR)))
