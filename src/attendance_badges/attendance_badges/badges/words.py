"""
Vocabulary used to build badge prompts.

The list is fetched from a plain-text URL (one word per line) and cached for
six hours. Fetch failures fall back to a small built-in list, so callers never
see an exception from here.
"""
from __future__ import annotations

import json
from typing import List, Optional

import httpx

from ..cache.base import Cache
from ..core.constants import (
    FALLBACK_WORDS,
    WORD_LIST_CACHE_KEY,
    WORD_LIST_MAX_CACHED_WORDS,
    WORD_LIST_TTL_SECONDS,
)
from ..core.exceptions import CacheValueTooLargeError
from ..logging_config import get_logger

logger = get_logger(__name__)


class WordListProvider:
    REQUEST_TIMEOUT = 10.0

    def __init__(
        self,
        cache: Cache,
        *,
        url: str,
        ttl_seconds: int = WORD_LIST_TTL_SECONDS,
        max_cached_words: int = WORD_LIST_MAX_CACHED_WORDS,
        client: Optional[httpx.Client] = None,
    ):
        self._cache = cache
        self._url = url
        self._ttl_seconds = ttl_seconds
        self._max_cached_words = max_cached_words
        self._client = client

    def get_word_list(self) -> List[str]:
        cached = self._cached_words()
        if cached:
            return cached

        try:
            words = self._fetch()
        except Exception as e:
            logger.error("word_list_fetch_failed", url=self._url, error=str(e))
            return list(FALLBACK_WORDS)

        if not words:
            logger.warning("word_list_empty", url=self._url)
            return list(FALLBACK_WORDS)

        try:
            self._cache.put(WORD_LIST_CACHE_KEY, json.dumps(words), self._ttl_seconds)
            return words
        except CacheValueTooLargeError as e:
            logger.warning("word_list_too_large", size=e.size, limit=e.limit, keep=self._max_cached_words)

        sliced = words[: self._max_cached_words]
        try:
            self._cache.put(WORD_LIST_CACHE_KEY, json.dumps(sliced), self._ttl_seconds)
        except CacheValueTooLargeError:
            logger.warning("word_list_not_cached", count=len(sliced))
        return sliced

    def _cached_words(self) -> List[str]:
        """Cached list, or [] when absent, empty or not a list of words."""

        raw = self._cache.get(WORD_LIST_CACHE_KEY)
        if not raw:
            return []
        try:
            words = json.loads(raw)
        except ValueError:
            words = None
        if not isinstance(words, list) or not all(isinstance(w, str) and w for w in words):
            logger.warning("word_list_cache_corrupt")
            return []
        return words

    def _fetch(self) -> List[str]:
        if self._client is not None:
            response = self._client.get(self._url)
        else:
            with httpx.Client(timeout=self.REQUEST_TIMEOUT, follow_redirects=True) as client:
                response = client.get(self._url)
        response.raise_for_status()
        return [w for w in response.text.splitlines() if w]
