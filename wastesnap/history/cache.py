"""
Upload history: a bounded, content-addressed LRU cache of analysis results.

Entries are kept most-recently-used first and persisted as one JSON array
under a fixed key of the injected store. The cache is an optimization only;
when the store fails, reads behave as misses and writes are skipped.
"""

import json
import logging
import threading
from typing import List, Optional

from pydantic import ValidationError

from wastesnap.errors import CacheUnavailable
from wastesnap.history.stores import KeyValueStore
from wastesnap.models import HistoryEntry

logger = logging.getLogger(__name__)

HISTORY_KEY = "wastesnap_upload_history"
DEFAULT_CAPACITY = 5


class ResultCache:
    def __init__(self, store: KeyValueStore, capacity: int = DEFAULT_CAPACITY, key: str = HISTORY_KEY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._store = store
        self._capacity = capacity
        self._key = key
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, entry: HistoryEntry) -> None:
        """Insert entry as most recently used, replacing any entry with the same hash."""
        with self._lock:
            entries = [e for e in self._load() if e.hash != entry.hash]
            entries.insert(0, entry)
            evicted = entries[self._capacity:]
            if evicted:
                logger.info(f"Evicting {len(evicted)} history entries: {[e.hash[:12] for e in evicted]}")
            self._save(entries[:self._capacity])

    def get(self, image_hash: str) -> Optional[HistoryEntry]:
        """Return the cached entry for image_hash and promote it, or None on a miss."""
        with self._lock:
            entries = self._load()
            for index, entry in enumerate(entries):
                if entry.hash == image_hash:
                    entries.insert(0, entries.pop(index))
                    self._save(entries)
                    return entry
            return None

    def clear(self) -> None:
        with self._lock:
            try:
                self._store.remove_item(self._key)
            except CacheUnavailable as e:
                logger.warning(f"History store unavailable, clear skipped: {e}")

    def list_all(self) -> List[HistoryEntry]:
        """All entries, most recently used first. Does not affect recency."""
        with self._lock:
            return self._load()

    def __len__(self) -> int:
        return len(self.list_all())

    def __contains__(self, image_hash: str) -> bool:
        return any(e.hash == image_hash for e in self.list_all())

    def _load(self) -> List[HistoryEntry]:
        try:
            raw = self._store.get_item(self._key)
        except CacheUnavailable as e:
            logger.warning(f"History store unavailable, treating as empty: {e}")
            return []
        if not raw:
            return []

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("History payload is not valid JSON, ignoring it")
            return []
        if not isinstance(payload, list):
            logger.warning("History payload is not a list, ignoring it")
            return []

        entries = []
        seen = set()
        for item in payload:
            try:
                entry = HistoryEntry.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping unreadable history entry: {e.error_count()} errors")
                continue
            if entry.hash not in seen:
                seen.add(entry.hash)
                entries.append(entry)
        return entries[:self._capacity]

    def _save(self, entries: List[HistoryEntry]) -> None:
        payload = json.dumps([e.model_dump(mode="json", by_alias=True) for e in entries])
        try:
            self._store.set_item(self._key, payload)
        except CacheUnavailable as e:
            logger.warning(f"History store unavailable, entries not persisted: {e}")
