import os

os.environ.setdefault("WASTESNAP_HISTORY_BACKEND", "memory")

import pytest

from wastesnap.history.cache import ResultCache
from wastesnap.history.stores import MemoryStore
from wastesnap.models import AnalysisResult, HistoryEntry


def make_entry(image_hash: str, timestamp: int = 0) -> HistoryEntry:
    return HistoryEntry(
        hash=image_hash,
        image_data_url=f"data:image/png;base64,{image_hash}",
        result=AnalysisResult(),
        timestamp=timestamp,
    )


@pytest.fixture
def memory_cache() -> ResultCache:
    return ResultCache(MemoryStore(), capacity=5)
