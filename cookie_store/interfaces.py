from __future__ import annotations

from typing import Any, Mapping, Protocol, TypeVar

T = TypeVar("T")


class KeyValueStore(Protocol):
    """
    A flat string-keyed mapping persisted as one JSON document.

    Every call reads or rewrites the whole document; nothing is cached.
    """

    def replace_all(self, entries: Mapping[str, Any]) -> bool:
        """Overwrite the document with `entries`. False if it could not be written."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Store `value` under `key`, or remove `key` when `value` is None."""
        ...

    def get_all(self) -> dict[str, Any]:
        """Return every entry (empty dict for a missing or unreadable document)."""
        ...

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def get_as(self, key: str, type_: type[T], default: T | None = None) -> T | None:
        ...

    def delete(self) -> bool:
        ...

    def exists(self) -> bool:
        ...
