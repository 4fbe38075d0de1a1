from __future__ import annotations

from .disk_store import DiskCookieStore, user_store
from .errors import CookieStoreError, CorruptCookieFileError, LockTimeoutError, LockUnavailableError
from .interfaces import KeyValueStore
from .json_codec import DEFAULT_JSON_OPTIONS, JsonOptions
from .repositories import AsyncCookieStore, AsyncKeyValueStore
from .settings import CookieSettings, get_settings

__all__ = [
    "KeyValueStore",
    "DiskCookieStore",
    "user_store",
    "AsyncKeyValueStore",
    "AsyncCookieStore",
    "JsonOptions",
    "DEFAULT_JSON_OPTIONS",
    "CookieSettings",
    "get_settings",
    "CookieStoreError",
    "CorruptCookieFileError",
    "LockTimeoutError",
    "LockUnavailableError",
]
