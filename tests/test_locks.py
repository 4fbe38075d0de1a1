from __future__ import annotations

import multiprocessing
import threading
import time
from pathlib import Path

import pytest
from filelock import FileLock

from cookie_store.disk_store import DiskCookieStore
from cookie_store.errors import CookieStoreError, LockTimeoutError, LockUnavailableError
from cookie_store.locks import GLOBAL_PATH_LOCKS, PathLockRegistry, lock_path_for


def _run_concurrently(*targets):
    start = threading.Barrier(len(targets))
    errors: list[BaseException] = []

    def _wrap(fn):
        def _inner():
            start.wait()
            try:
                fn()
            except BaseException as e:  # surfaced by the assert below
                errors.append(e)

        return _inner

    threads = [threading.Thread(target=_wrap(fn)) for fn in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    assert not errors


def test_registry_returns_one_lock_per_path(tmp_path):
    registry = PathLockRegistry()
    a = registry.lock_for(tmp_path / "Cookies.json")
    b = registry.lock_for(tmp_path / "sub" / ".." / "Cookies.json")
    c = registry.lock_for(tmp_path / "Other.json")
    assert a is b
    assert a is not c
    assert a.lock_file == str(lock_path_for((tmp_path / "Cookies.json").resolve()))


def test_concurrent_sets_on_same_path_are_not_lost(tmp_path):
    path = tmp_path / "Cookies.json"
    DiskCookieStore(path).replace_all({})

    _run_concurrently(
        lambda: DiskCookieStore(path).set("a", 1),
        lambda: DiskCookieStore(path).set("b", 2),
    )

    assert DiskCookieStore(path).get_all() == {"a": 1, "b": 2}


def test_many_concurrent_writers(tmp_path):
    path = tmp_path / "Cookies.json"

    def _writer(i: int):
        def _run():
            s = DiskCookieStore(path)
            for j in range(5):
                assert s.set(f"w{i}-{j}", j) is True

        return _run

    _run_concurrently(*[_writer(i) for i in range(8)])

    entries = DiskCookieStore(path).get_all()
    assert len(entries) == 40
    assert entries["w7-4"] == 4


def test_lock_timeout_raises(tmp_path):
    store = DiskCookieStore(tmp_path / "Cookies.json", lock_timeout=0.1)
    held = threading.Event()
    done = threading.Event()

    def _holder():
        # separate FileLock object, same lock file: behaves like another process
        with FileLock(str(store.lock_path)):
            held.set()
            done.wait(timeout=10)

    t = threading.Thread(target=_holder)
    t.start()
    try:
        assert held.wait(timeout=10)
        started = time.monotonic()
        with pytest.raises(LockTimeoutError) as exc:
            store.set("a", 1)
        assert time.monotonic() - started >= 0.1
        assert isinstance(exc.value, CookieStoreError)
        assert isinstance(exc.value, TimeoutError)
        assert exc.value.lock_path.resolve() == store.lock_path.resolve()
        assert exc.value.timeout == 0.1
    finally:
        done.set()
        t.join(timeout=10)

    # nothing was written while the lock was held elsewhere
    assert store.exists() is False
    assert store.set("a", 1) is True


def test_lock_released_after_failure(tmp_path):
    store = DiskCookieStore(tmp_path / "Cookies.json", lock_timeout=0.5, strict=True)
    store.path.write_text("not json", encoding="utf-8")

    with pytest.raises(CookieStoreError):
        store.get_all()

    # a fresh, non-strict handle can still take the lock
    store.path.unlink()
    assert DiskCookieStore(store.path, lock_timeout=0.5).set("a", 1) is True


def test_acquire_creates_lock_directory(tmp_path):
    target = tmp_path / "nested" / "dir" / "Cookies.json"
    with GLOBAL_PATH_LOCKS.acquire(target, timeout=1):
        assert lock_path_for(target.resolve()).parent.is_dir()


def _set_many_in_process(path: str, worker: int, rounds: int, start) -> None:
    # runs in a spawned child process
    start.wait(timeout=30)
    store = DiskCookieStore(Path(path))
    for j in range(rounds):
        if not store.set(f"p{worker}-{j}", j):
            raise SystemExit(1)


def test_concurrent_sets_across_processes(tmp_path):
    path = tmp_path / "Cookies.json"
    ctx = multiprocessing.get_context("spawn")
    workers, rounds = 4, 10
    start = ctx.Barrier(workers)

    procs = [
        ctx.Process(target=_set_many_in_process, args=(str(path), i, rounds, start))
        for i in range(workers)
    ]
    for p in procs:
        p.start()
    for p in procs:
        p.join(timeout=120)
    assert [p.exitcode for p in procs] == [0] * workers

    entries = DiskCookieStore(path).get_all()
    assert entries == {f"p{i}-{j}": j for i in range(workers) for j in range(rounds)}


def test_acquire_reports_unusable_lock_location(tmp_path):
    blocker = tmp_path / "afile"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(LockUnavailableError) as exc:
        with GLOBAL_PATH_LOCKS.acquire(blocker / "Cookies.json", timeout=1):
            pass
    assert isinstance(exc.value, CookieStoreError)
    assert isinstance(exc.value.cause, OSError)
    assert exc.value.lock_path.name == "Cookies.json.lock"
