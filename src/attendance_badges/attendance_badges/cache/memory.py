from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ..core.constants import CACHE_MAX_VALUE_BYTES
from ..core.exceptions import CacheValueTooLargeError
from .base import Cache


class InMemoryTTLCache(Cache):
    """Process-local cache, used in development and tests."""

    def __init__(
        self,
        *,
        max_value_bytes: int = CACHE_MAX_VALUE_BYTES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._max_value_bytes = max_value_bytes
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        size = len(value.encode("utf-8"))
        if size > self._max_value_bytes:
            raise CacheValueTooLargeError(key, size, self._max_value_bytes)

        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
