from __future__ import annotations

from typing import Optional, Protocol


class Cache(Protocol):
    """String key/value cache with per-entry TTL.

    ``put`` raises CacheValueTooLargeError when the value exceeds the backend's
    per-entry limit. Other backend failures are logged, not raised.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
