from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


ENV_VARS = (
    "COOKIE_STORE_PATH",
    "COOKIE_STORE_APP_NAME",
    "COOKIE_STORE_DATA_DIR",
    "COOKIE_STORE_LOCK_TIMEOUT",
    "COOKIE_STORE_STRICT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    # setenv first so values loaded from .env files are undone at teardown too
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def sandbox_user_dir(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Redirect user:// to a temp directory so tests never touch the real user data dir.
    """
    user_dir = tmp_path / "user"
    clean_env.setenv("COOKIE_STORE_DATA_DIR", str(user_dir))
    return user_dir


@pytest.fixture
def store(tmp_path: Path):
    from cookie_store.disk_store import DiskCookieStore

    return DiskCookieStore(tmp_path / "Cookies.json")
