from __future__ import annotations

import asyncio
from typing import Any, Mapping, Protocol, TypeVar

from .disk_store import DiskCookieStore

T = TypeVar("T")


class AsyncKeyValueStore(Protocol):
    async def replace_all(self, entries: Mapping[str, Any]) -> bool: ...
    async def set(self, key: str, value: Any) -> bool: ...

    async def get_all(self) -> dict[str, Any]: ...
    async def get(self, key: str, default: Any = None) -> Any: ...
    async def get_as(self, key: str, type_: type[T], default: T | None = None) -> T | None: ...

    async def delete(self) -> bool: ...
    async def exists(self) -> bool: ...


class AsyncCookieStore(AsyncKeyValueStore):
    """
    Async wrapper around the disk-backed cookie store.
    Uses asyncio.to_thread so file I/O and lock waits don't block the event loop.
    """

    def __init__(self, store: DiskCookieStore | None = None) -> None:
        self._store = store if store is not None else DiskCookieStore.user()

    @property
    def store(self) -> DiskCookieStore:
        return self._store

    async def replace_all(self, entries: Mapping[str, Any]) -> bool:
        return await asyncio.to_thread(self._store.replace_all, entries)

    async def set(self, key: str, value: Any) -> bool:
        return await asyncio.to_thread(self._store.set, key, value)

    async def get_all(self) -> dict[str, Any]:
        return await asyncio.to_thread(self._store.get_all)

    async def get(self, key: str, default: Any = None) -> Any:
        return await asyncio.to_thread(self._store.get, key, default)

    async def get_as(self, key: str, type_: type[T], default: T | None = None) -> T | None:
        return await asyncio.to_thread(self._store.get_as, key, type_, default)

    async def delete(self) -> bool:
        return await asyncio.to_thread(self._store.delete)

    async def exists(self) -> bool:
        return await asyncio.to_thread(self._store.exists)
