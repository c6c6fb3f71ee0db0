import pytest

from src.attendance_badges.attendance_badges.cache.memory import InMemoryTTLCache
from src.attendance_badges.attendance_badges.core.exceptions import CacheValueTooLargeError


class Ticker:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


def test_put_get_and_expiry():
    ticker = Ticker()
    cache = InMemoryTTLCache(clock=ticker)

    cache.put("WORD_LIST", '["a"]', 60)
    assert cache.get("WORD_LIST") == '["a"]'

    ticker.t = 60
    assert cache.get("WORD_LIST") is None


def test_missing_key():
    assert InMemoryTTLCache().get("nothing") is None


def test_oversized_value_is_rejected_and_not_stored():
    cache = InMemoryTTLCache(max_value_bytes=10)

    with pytest.raises(CacheValueTooLargeError) as exc:
        cache.put("k", "x" * 11, 60)

    assert exc.value.size == 11
    assert cache.get("k") is None


def test_delete_is_idempotent():
    cache = InMemoryTTLCache()
    cache.put("scheduled:process_pending_badges", "x", 60)

    cache.delete("scheduled:process_pending_badges")
    cache.delete("scheduled:process_pending_badges")

    assert cache.get("scheduled:process_pending_badges") is None
