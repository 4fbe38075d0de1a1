from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, TypeVar

from pydantic import TypeAdapter

from .errors import CorruptCookieFileError, LockUnavailableError
from .interfaces import KeyValueStore
from .json_codec import DEFAULT_JSON_OPTIONS, JsonOptions, atomic_write_text, dumps, loads, read_text
from .locks import GLOBAL_PATH_LOCKS, lock_path_for
from .paths import resolve_path
from .settings import DEFAULT_LOCK_TIMEOUT, CookieSettings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DiskCookieStore(KeyValueStore):
    """
    Stores a flat key-value mapping as a single JSON object on disk.

    - Every public call holds the `<path>.lock` file lock exactly once and
      reads or rewrites the whole file; nothing is cached between calls.
    - A missing or blank file is an empty mapping.
    - A file that can't be read or isn't a JSON object is logged and treated
      as empty, so a corrupted file looks the same as an empty one to the
      caller. Pass `strict=True` to get `CorruptCookieFileError` instead.
    - Writes are atomic (temp file + replace) and return False on I/O errors,
      including a path where the lock file can't be created.
    - Lock waits longer than `lock_timeout` raise `LockTimeoutError`.
    """

    path: Path
    options: JsonOptions = DEFAULT_JSON_OPTIONS
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    strict: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))

    @classmethod
    def for_path(
        cls,
        path: str | Path,
        settings: CookieSettings | None = None,
        *,
        options: JsonOptions = DEFAULT_JSON_OPTIONS,
    ) -> "DiskCookieStore":
        """Build a store for `path` (plain or `user://`), configured from settings."""
        s = settings or get_settings()
        return cls(
            path=resolve_path(path, user_dir=s.user_dir),
            options=options,
            lock_timeout=s.lock_timeout,
            strict=s.strict,
        )

    @classmethod
    def user(
        cls,
        settings: CookieSettings | None = None,
        *,
        options: JsonOptions = DEFAULT_JSON_OPTIONS,
    ) -> "DiskCookieStore":
        """The default store, `user://Cookies.json` unless configured otherwise."""
        s = settings or get_settings()
        return cls.for_path(s.path, s, options=options)

    @property
    def lock_path(self) -> Path:
        return lock_path_for(self.path)

    # Public operations: lock once, then call the lock-free cores below.
    # A lock file that can't be created means the path is unusable, which maps
    # to the same False / empty results as any other I/O failure.

    def replace_all(self, entries: Mapping[str, Any]) -> bool:
        try:
            with self._locked():
                return self._write_entries(entries)
        except LockUnavailableError:
            return False

    def set(self, key: str, value: Any) -> bool:
        try:
            with self._locked():
                entries = self._read_entries()
                if value is not None:
                    entries[key] = value
                else:
                    entries.pop(key, None)
                return self._write_entries(entries)
        except LockUnavailableError:
            return False

    def get_all(self) -> dict[str, Any]:
        try:
            with self._locked():
                return self._read_entries()
        except LockUnavailableError:
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.get_all().get(key, default)

    def get_as(self, key: str, type_: type[T], default: T | None = None) -> T | None:
        """
        Read `key` and convert it to `type_` (a pydantic model, dataclass,
        TypedDict, builtin or generic alias).

        Missing keys and null values return `default`; values of the wrong shape
        raise `pydantic.ValidationError`.
        """
        value = self.get_all().get(key)
        if value is None:
            return default
        return TypeAdapter(type_).validate_python(value)

    def delete(self) -> bool:
        try:
            with self._locked():
                try:
                    self.path.unlink()
                except FileNotFoundError:
                    return False
                except OSError as e:
                    logger.warning("COOKIES DELETE: failed to remove %s: %r", self.path, e)
                    return False
                logger.debug("COOKIES DELETE: removed %s", self.path)
                return True
        except LockUnavailableError:
            return False

    def exists(self) -> bool:
        try:
            with self._locked():
                return self.path.is_file()
        except LockUnavailableError:
            return False

    def _locked(self):
        return GLOBAL_PATH_LOCKS.acquire(self.path, self.lock_timeout)

    # Lock-free cores; callers must hold the path lock.

    def _read_entries(self) -> dict[str, Any]:
        try:
            raw = read_text(self.path)
        except UnicodeDecodeError as e:
            return self._corrupt(f"not UTF-8 text ({e.reason})")
        except OSError as e:
            return self._corrupt(f"cannot read file ({e!r})")
        if raw is None or not raw.strip():
            return {}
        try:
            doc = loads(raw, self.options)
        except json.JSONDecodeError as e:
            return self._corrupt(f"invalid JSON ({e.msg} at line {e.lineno} column {e.colno})")
        if not isinstance(doc, dict):
            return self._corrupt(f"expected a JSON object, got {type(doc).__name__}")
        return doc

    def _write_entries(self, entries: Mapping[str, Any]) -> bool:
        text = dumps(dict(entries), self.options)
        try:
            atomic_write_text(self.path, text)
        except OSError as e:
            logger.warning("COOKIES SAVE: failed to write %s: %r", self.path, e)
            return False
        logger.debug("COOKIES SAVE: wrote %d entries to %s", len(entries), self.path)
        return True

    def _corrupt(self, reason: str) -> dict[str, Any]:
        if self.strict:
            raise CorruptCookieFileError(self.path, reason)
        logger.warning("COOKIES LOAD: %s is unreadable, treating as empty: %s", self.path, reason)
        return {}


def user_store(settings: CookieSettings | None = None) -> DiskCookieStore:
    return DiskCookieStore.user(settings)
