from __future__ import annotations

import contextlib
import logging
import threading
from pathlib import Path
from typing import Iterator

from filelock import FileLock, Timeout

from .errors import LockTimeoutError, LockUnavailableError
from .paths import ensure_dir

logger = logging.getLogger(__name__)


def lock_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


class PathLockRegistry:
    """
    Provides a stable cross-process lock per normalized file path.

    The lock is a `FileLock` on `<path>.lock`, so other processes opening the
    same data file contend on it too. `FileLock` is thread-local, which also
    serializes threads of this process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, FileLock] = {}

    def lock_for(self, path: Path) -> FileLock:
        key = str(path.resolve())
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = FileLock(str(lock_path_for(Path(key))), thread_local=True)
                self._locks[key] = lock
            return lock

    @contextlib.contextmanager
    def acquire(self, path: Path, timeout: float) -> Iterator[None]:
        """
        Hold the lock for `path` for the duration of the block.

        Raises `LockTimeoutError` if it can't be taken within `timeout` seconds
        and `LockUnavailableError` if the lock file can't be created at all.
        """
        lock = self.lock_for(path)
        lock_file = Path(lock.lock_file)
        try:
            ensure_dir(lock_file.parent)
            lock.acquire(timeout=timeout)
        except Timeout as e:
            logger.warning("COOKIES LOCK: timed out after %ss on %s", timeout, lock_file)
            raise LockTimeoutError(lock_file, timeout) from e
        except OSError as e:
            # Timeout is an OSError too, so it must be caught first
            logger.warning("COOKIES LOCK: cannot create %s: %r", lock_file, e)
            raise LockUnavailableError(lock_file, e) from e
        logger.debug("COOKIES LOCK: acquired %s", lock.lock_file)
        try:
            yield
        finally:
            lock.release()
            logger.debug("COOKIES LOCK: released %s", lock.lock_file)


GLOBAL_PATH_LOCKS = PathLockRegistry()
