from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from ..schemas.trivia import TriviaResponse
from .storage import SessionStorage, StorageError


LOGGER = logging.getLogger(__name__)

CACHE_PREFIX = "trivia-cache:"


class TriviaCache:
    """Session-scoped read-through/write-through cache of trivia pages.

    Without a storage backend every read is a miss and every write is dropped.
    """

    def __init__(self, storage: Optional[SessionStorage] = None) -> None:
        self.storage = storage

    @property
    def available(self) -> bool:
        return self.storage is not None

    def _make_key(self, query_key: str) -> str:
        return f"{CACHE_PREFIX}{query_key}"

    def read(self, query_key: str) -> Optional[TriviaResponse]:
        if self.storage is None:
            return None
        key = self._make_key(query_key)
        try:
            cached = self.storage.get_item(key)
        except StorageError as exc:
            LOGGER.warning("cache_read_failed key=%s error=%s", key, exc)
            return None
        if not cached:
            return None
        try:
            return TriviaResponse.model_validate_json(cached)
        except ValidationError:
            LOGGER.warning("cache_entry_corrupt key=%s evicting=True", key)
            self.evict(query_key)
            return None

    def write(self, query_key: str, response: TriviaResponse) -> None:
        if self.storage is None:
            return
        key = self._make_key(query_key)
        try:
            self.storage.set_item(key, response.model_dump_json(by_alias=True))
        except StorageError as exc:
            LOGGER.warning("cache_write_failed key=%s error=%s", key, exc)

    def evict(self, query_key: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.remove_item(self._make_key(query_key))
        except StorageError as exc:
            LOGGER.warning("cache_evict_failed key=%s error=%s", query_key, exc)

    def clear(self) -> None:
        if self.storage is None:
            return
        for key in self.storage.keys():
            if key.startswith(CACHE_PREFIX):
                self.storage.remove_item(key)

    def size(self) -> int:
        if self.storage is None:
            return 0
        return sum(1 for key in self.storage.keys() if key.startswith(CACHE_PREFIX))
