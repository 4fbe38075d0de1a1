from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .paths import user_data_dir

logger = logging.getLogger(__name__)

DEFAULT_PATH = "user://Cookies.json"
DEFAULT_APP_NAME = "cookie-store"
DEFAULT_LOCK_TIMEOUT = 5.0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("SETTINGS: %s=%r is not a number, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("SETTINGS: %s=%r is negative, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class CookieSettings:
    # Default store location; may use the user:// scheme
    path: str = DEFAULT_PATH

    # user:// resolution
    app_name: str = DEFAULT_APP_NAME
    data_dir: Path | None = None

    # Locking
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    # Raise instead of treating a corrupt file as empty
    strict: bool = False

    @property
    def user_dir(self) -> Path:
        if self.data_dir is not None:
            return self.data_dir
        return user_data_dir(self.app_name)


def get_settings(env_file: str | Path | None = None) -> CookieSettings:
    if env_file is not None:
        load_dotenv(env_file)

    path = os.getenv("COOKIE_STORE_PATH", "").strip() or DEFAULT_PATH
    app_name = os.getenv("COOKIE_STORE_APP_NAME", "").strip() or DEFAULT_APP_NAME

    raw_dir = os.getenv("COOKIE_STORE_DATA_DIR", "").strip()
    data_dir = Path(raw_dir).expanduser() if raw_dir else None

    lock_timeout = _env_float("COOKIE_STORE_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT)
    strict = _env_bool("COOKIE_STORE_STRICT", False)

    return CookieSettings(
        path=path,
        app_name=app_name,
        data_dir=data_dir,
        lock_timeout=lock_timeout,
        strict=strict,
    )
