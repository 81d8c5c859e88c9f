from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from grant_core.exceptions import ValidationError
from grant_infra.path import default_db_path, user_data_dir
from grant_infra.version import get_app_version

ENV_DATABASE_URL = "GRANTS_DATABASE_URL"
ENV_LOG_LEVEL = "GRANTS_LOG_LEVEL"
ENV_LOG_DIR = "GRANTS_LOG_DIR"
ENV_APP_VERSION = "GRANTS_APP_VERSION"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_dir: Path
    support_events_path: Path
    app_version: str

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def _clean(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = (environ.get(key) or "").strip()
    return value or None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build runtime settings from ``GRANTS_*`` environment variables.

    Unset values fall back to a SQLite file and a logs folder under the
    per-user data directory.
    """
    env = os.environ if environ is None else environ

    log_level = (_clean(env, ENV_LOG_LEVEL) or "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ValidationError(
            f"Unknown log level {log_level!r}; expected one of {', '.join(_LOG_LEVELS)}.",
            code="CONFIG_LOG_LEVEL",
        )

    database_url = _clean(env, ENV_DATABASE_URL)
    if database_url is None:
        database_url = f"sqlite:///{default_db_path().as_posix()}"

    log_dir_raw = _clean(env, ENV_LOG_DIR)
    log_dir = Path(log_dir_raw) if log_dir_raw else user_data_dir() / "logs"

    return Settings(
        database_url=database_url,
        log_level=log_level,
        log_dir=log_dir,
        support_events_path=log_dir / "support-events.jsonl",
        app_version=_clean(env, ENV_APP_VERSION) or get_app_version(),
    )


__all__ = ["Settings", "load_settings"]
