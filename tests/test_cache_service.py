from conftest import make_payload
from trivia_query.schemas.trivia import TriviaResponse
from trivia_query.services.cache import TriviaCache
from trivia_query.services.storage import StorageError


KEY = "difficulty=easy&offset=0&limit=5"


def test_trivia_cache_stores_and_returns_copy(cache, storage):
    response = TriviaResponse.model_validate(make_payload())
    cache.write(KEY, response)

    assert storage.get_item(f"trivia-cache:{KEY}") is not None
    cached = cache.read(KEY)
    assert cached == response
    assert cached is not response  # ensure copy

    cached.items.clear()
    assert len(cache.read(KEY).items) == 5


def test_cache_keeps_wire_field_names(cache, storage):
    cache.write(KEY, TriviaResponse.model_validate(make_payload()))
    raw = storage.get_item(f"trivia-cache:{KEY}")
    assert '"correctIndex"' in raw


def test_corrupt_entry_is_evicted(cache, storage):
    storage.set_item(f"trivia-cache:{KEY}", "{not json")

    assert cache.read(KEY) is None
    assert storage.get_item(f"trivia-cache:{KEY}") is None


def test_write_replaces_previous_entry(cache):
    cache.write(KEY, TriviaResponse.model_validate(make_payload(limit=5)))
    cache.write(KEY, TriviaResponse.model_validate(make_payload(limit=2)))
    assert len(cache.read(KEY).items) == 2
    assert cache.size() == 1


def test_missing_storage_is_permanent_miss():
    cache = TriviaCache()
    cache.write(KEY, TriviaResponse.model_validate(make_payload()))
    assert not cache.available
    assert cache.read(KEY) is None
    assert cache.size() == 0


class BrokenStorage:
    def get_item(self, key):
        raise StorageError("quota exceeded")

    def set_item(self, key, value):
        raise StorageError("quota exceeded")

    def remove_item(self, key):
        raise StorageError("quota exceeded")

    def keys(self):
        return []


def test_storage_errors_do_not_reach_caller():
    cache = TriviaCache(BrokenStorage())
    cache.write(KEY, TriviaResponse.model_validate(make_payload()))
    assert cache.read(KEY) is None


def test_clear_only_removes_trivia_entries(cache, storage):
    storage.set_item("other", "keep me")
    cache.write(KEY, TriviaResponse.model_validate(make_payload()))
    cache.clear()
    assert cache.size() == 0
    assert storage.get_item("other") == "keep me"
