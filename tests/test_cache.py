import threading
import time

import pytest

from conftest import make_entry
from wastesnap.errors import CacheUnavailable
from wastesnap.history.cache import HISTORY_KEY, ResultCache
from wastesnap.history.stores import JsonFileStore, MemoryStore
from wastesnap.models import AnalysisResult, Category, CategorySummary, DetectionRecord, HistoryEntry


class BrokenStore:
    def get_item(self, key):
        raise CacheUnavailable("store disabled")

    def set_item(self, key, value):
        raise CacheUnavailable("store full")

    def remove_item(self, key):
        raise CacheUnavailable("store disabled")


def _hashes(cache: ResultCache) -> list:
    return [e.hash for e in cache.list_all()]


def test_sixth_insert_evicts_least_recently_used(memory_cache) -> None:
    for i in range(6):
        memory_cache.put(make_entry(f"h{i}", timestamp=i))

    assert _hashes(memory_cache) == ["h5", "h4", "h3", "h2", "h1"]
    assert memory_cache.get("h0") is None


def test_get_promotes_entry_to_front(memory_cache) -> None:
    for i in range(5):
        memory_cache.put(make_entry(f"h{i}"))

    assert memory_cache.get("h0").hash == "h0"
    assert _hashes(memory_cache)[0] == "h0"

    memory_cache.put(make_entry("h5"))
    assert _hashes(memory_cache) == ["h5", "h0", "h4", "h3", "h2"]


def test_list_all_does_not_change_order(memory_cache) -> None:
    memory_cache.put(make_entry("a"))
    memory_cache.put(make_entry("b"))
    memory_cache.list_all()
    assert "a" in memory_cache
    assert _hashes(memory_cache) == ["b", "a"]


def test_duplicate_hash_replaces_entry(memory_cache) -> None:
    memory_cache.put(make_entry("a", timestamp=1))
    memory_cache.put(make_entry("b", timestamp=2))
    memory_cache.put(make_entry("a", timestamp=3))

    entries = memory_cache.list_all()
    assert [e.hash for e in entries] == ["a", "b"]
    assert entries[0].timestamp == 3
    assert len(memory_cache) == 2


def test_put_then_get_returns_equal_entry(memory_cache) -> None:
    detection = DetectionRecord(
        label="can", confidence=0.9, x=0.1, y=0.2, width=0.3, height=0.4,
        category=Category.RECYCLABLE, description="soda can", is_trash=False,
    )
    entry = HistoryEntry(
        hash="abc",
        image_data_url="data:image/png;base64,AAAA",
        result=AnalysisResult(
            detections=[detection],
            summary=CategorySummary(recyclable=1),
            recommendations=["Separate recyclable items (can) for recycling"],
        ),
        timestamp=1700000000000,
    )
    memory_cache.put(entry)
    assert memory_cache.get("abc") == entry


def test_clear_empties_cache(memory_cache) -> None:
    memory_cache.put(make_entry("a"))
    memory_cache.clear()
    assert memory_cache.list_all() == []


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ResultCache(MemoryStore(), capacity=0)


def test_unavailable_store_degrades_to_misses() -> None:
    cache = ResultCache(BrokenStore())
    cache.put(make_entry("a"))
    assert cache.get("a") is None
    assert cache.list_all() == []
    cache.clear()


def test_corrupt_payload_is_treated_as_empty() -> None:
    store = MemoryStore()
    store.set_item(HISTORY_KEY, "{not json")
    cache = ResultCache(store)
    assert cache.list_all() == []

    cache.put(make_entry("a"))
    assert _hashes(cache) == ["a"]


def test_unreadable_entries_are_skipped() -> None:
    store = MemoryStore()
    store.set_item(HISTORY_KEY, '[{"hash": "x"}, "junk"]')
    assert ResultCache(store).list_all() == []


def test_payload_uses_camel_case_data_url() -> None:
    store = MemoryStore()
    ResultCache(store).put(make_entry("a"))
    assert '"imageDataUrl"' in store.get_item(HISTORY_KEY)


def test_file_backed_history_survives_new_instance(tmp_path) -> None:
    ResultCache(JsonFileStore(tmp_path)).put(make_entry("a"))
    ResultCache(JsonFileStore(tmp_path)).put(make_entry("b"))

    assert _hashes(ResultCache(JsonFileStore(tmp_path))) == ["b", "a"]


def test_file_store_round_trip(tmp_path) -> None:
    store = JsonFileStore(tmp_path / "history")
    assert store.get_item("k") is None

    store.set_item("k", "value")
    assert store.get_item("k") == "value"

    store.remove_item("k")
    store.remove_item("k")
    assert store.get_item("k") is None


def test_file_store_errors_become_cache_unavailable(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = JsonFileStore(blocker)

    with pytest.raises(CacheUnavailable):
        store.set_item("k", "value")
    with pytest.raises(CacheUnavailable):
        store.get_item("k")

    cache = ResultCache(store)
    cache.put(make_entry("a"))
    assert cache.get("a") is None


def test_concurrent_puts_and_gets_keep_bound_and_unique_hashes() -> None:
    cache = ResultCache(MemoryStore(), capacity=5)
    errors = []

    def worker(offset: int) -> None:
        try:
            for i in range(50):
                image_hash = f"h{(offset + i) % 8}"
                cache.put(make_entry(image_hash, timestamp=i))
                cache.get(f"h{(offset + i + 3) % 8}")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    hashes = _hashes(cache)
    assert len(hashes) <= cache.capacity
    assert len(hashes) == len(set(hashes))


class SlowStore(MemoryStore):
    """Widens the window between reading and writing the history payload."""

    def get_item(self, key):
        value = super().get_item(key)
        time.sleep(0.001)
        return value


def test_concurrent_puts_are_not_lost() -> None:
    cache = ResultCache(SlowStore(), capacity=100)

    def worker(offset: int) -> None:
        for i in range(10):
            cache.put(make_entry(f"t{offset}-{i}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 60
