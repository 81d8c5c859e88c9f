# grant_infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "GrantTracker"
COMPANY_NAME = "GrantOps"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\GrantOps\\GrantTracker

    macOS:
        ~/Library/Application Support/GrantOps/GrantTracker

    Linux:
        ~/.local/share/GrantOps/GrantTracker
    """
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    return user_data_dir() / "grants.db"
