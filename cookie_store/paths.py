from __future__ import annotations

import os
import sys
from pathlib import Path

USER_SCHEME = "user://"


def user_data_dir(app_name: str) -> Path:
    """
    Per-user application data directory (not created).
    """
    if sys.platform.startswith("win"):
        base = os.getenv("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(base) / app_name
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / app_name
    base = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / app_name


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_path(path: str | Path, *, user_dir: Path) -> Path:
    """
    Resolve a store path to an absolute filesystem path.

    `user://Cookies.json` maps into `user_dir`; anything else is taken as a
    regular path (relative paths resolve against the cwd).
    """
    raw = str(path)
    if raw.startswith(USER_SCHEME):
        rel = raw[len(USER_SCHEME):].lstrip("/\\")
        return (user_dir / rel).resolve()
    return Path(raw).expanduser().resolve()
