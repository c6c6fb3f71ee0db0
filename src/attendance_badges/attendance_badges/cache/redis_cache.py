"""
Redis-backed cache.

Degrades gracefully: if Redis is unreachable, reads miss and writes are
dropped with a warning.
"""
from __future__ import annotations

from typing import Optional

import redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from ..core.constants import CACHE_MAX_VALUE_BYTES
from ..core.exceptions import CacheValueTooLargeError
from ..logging_config import get_logger
from .base import Cache

logger = get_logger(__name__)


class RedisCache(Cache):
    def __init__(
        self,
        url: str,
        *,
        max_value_bytes: int = CACHE_MAX_VALUE_BYTES,
        client: Optional[redis.Redis] = None,
    ):
        self._url = url
        self._max_value_bytes = max_value_bytes
        self._client = client

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is not None:
            return self._client

        try:
            client = redis.from_url(
                self._url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            client.ping()
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning("redis_unavailable", error=str(e))
            return None

        logger.info("redis_connected")
        self._client = client
        return client

    def get(self, key: str) -> Optional[str]:
        client = self._get_client()
        if not client:
            return None

        try:
            return client.get(key)
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None

    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        size = len(value.encode("utf-8"))
        if size > self._max_value_bytes:
            raise CacheValueTooLargeError(key, size, self._max_value_bytes)

        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl_seconds, value)
            return True
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning("cache_set_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> None:
        client = self._get_client()
        if not client:
            return

        try:
            client.delete(key)
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
