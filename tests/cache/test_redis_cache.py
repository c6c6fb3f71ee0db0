import pytest
from redis.exceptions import ConnectionError

from src.attendance_badges.attendance_badges.cache.redis_cache import RedisCache
from src.attendance_badges.attendance_badges.core.exceptions import CacheValueTooLargeError


class FakeRedis:
    def __init__(self, fail=False):
        self.store = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise ConnectionError("down")
        return self.store.get(key)

    def setex(self, key, ttl, value):
        if self.fail:
            raise ConnectionError("down")
        self.store[key] = (value, ttl)

    def delete(self, key):
        if self.fail:
            raise ConnectionError("down")
        self.store.pop(key, None)


def test_put_uses_setex_with_ttl():
    client = FakeRedis()
    cache = RedisCache("redis://unused", client=client)

    assert cache.put("WORD_LIST", "[]", 21600) is True
    assert client.store["WORD_LIST"] == ("[]", 21600)


def test_errors_degrade_to_miss():
    cache = RedisCache("redis://unused", client=FakeRedis(fail=True))

    assert cache.get("WORD_LIST") is None
    assert cache.put("WORD_LIST", "[]", 60) is False
    cache.delete("WORD_LIST")


def test_size_limit_is_enforced_before_writing():
    client = FakeRedis()
    cache = RedisCache("redis://unused", max_value_bytes=4, client=client)

    with pytest.raises(CacheValueTooLargeError):
        cache.put("k", "12345", 60)
    assert client.store == {}


def test_delete_removes_key():
    client = FakeRedis()
    cache = RedisCache("redis://unused", client=client)
    cache.put("scheduled:process_pending_badges", "2025-03-10T18:00:00+00:00", 60)

    cache.delete("scheduled:process_pending_badges")

    assert "scheduled:process_pending_badges" not in client.store
