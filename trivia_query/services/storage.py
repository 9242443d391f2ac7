from __future__ import annotations

from threading import Lock
from typing import Dict, List, Optional, Protocol


class StorageError(Exception):
    """Raised by a session storage backend that cannot serve a request."""


class SessionStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


class InMemorySessionStorage:
    """Thread-safe text key/value store that lives as long as the process."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}
        self._lock = Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


_default_storage = InMemorySessionStorage()


def default_session_storage() -> InMemorySessionStorage:
    """Storage shared by every controller created in this session."""
    return _default_storage
