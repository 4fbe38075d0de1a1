from __future__ import annotations

from pathlib import Path


class CookieStoreError(Exception):
    """Base class for errors raised across the store boundary."""


class LockTimeoutError(CookieStoreError, TimeoutError):
    def __init__(self, lock_path: Path, timeout: float):
        super().__init__(f"could not acquire {lock_path} within {timeout:g}s")
        self.lock_path = lock_path
        self.timeout = timeout


class CorruptCookieFileError(CookieStoreError, ValueError):
    """
    Raised by strict stores when the file exists but does not hold a JSON object.

    Non-strict stores log and treat the file as empty instead.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class LockUnavailableError(CookieStoreError):
    """
    The lock file couldn't be created (parent is a file, no permission, ...).

    Stores map this to their False / empty results; it doesn't leave the store.
    """

    def __init__(self, lock_path: Path, cause: OSError):
        super().__init__(f"cannot create lock {lock_path}: {cause}")
        self.lock_path = lock_path
        self.cause = cause
