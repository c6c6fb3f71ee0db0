from __future__ import annotations

import json

import httpx

from src.attendance_badges.attendance_badges.badges.words import WordListProvider
from src.attendance_badges.attendance_badges.cache.memory import InMemoryTTLCache
from src.attendance_badges.attendance_badges.core.constants import FALLBACK_WORDS, WORD_LIST_CACHE_KEY

URL = "https://words.example/list.txt"


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_cache_hit_is_returned_verbatim_without_fetching():
    cache = InMemoryTTLCache()
    cache.put(WORD_LIST_CACHE_KEY, json.dumps(["alpha", "beta"]), 60)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="nope\n")

    provider = WordListProvider(cache, url=URL, client=_client(handler))

    assert provider.get_word_list() == ["alpha", "beta"]
    assert calls == []


def test_miss_fetches_splits_and_caches():
    cache = InMemoryTTLCache()

    def handler(request):
        return httpx.Response(200, text="the\nof\n\nand\r\nto\n")

    provider = WordListProvider(cache, url=URL, client=_client(handler))

    assert provider.get_word_list() == ["the", "of", "and", "to"]
    assert json.loads(cache.get(WORD_LIST_CACHE_KEY)) == ["the", "of", "and", "to"]


def test_fetch_failure_returns_fallback_words():
    def handler(request):
        return httpx.Response(503)

    provider = WordListProvider(InMemoryTTLCache(), url=URL, client=_client(handler))

    assert provider.get_word_list() == list(FALLBACK_WORDS)
    assert len(FALLBACK_WORDS) == 10


def test_network_error_returns_fallback_words():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    provider = WordListProvider(InMemoryTTLCache(), url=URL, client=_client(handler))

    assert provider.get_word_list() == list(FALLBACK_WORDS)


def test_too_large_for_cache_is_truncated_to_first_tokens():
    words = [f"word{i:05d}" for i in range(12_000)]
    cache = InMemoryTTLCache(max_value_bytes=100 * 1024)

    def handler(request):
        return httpx.Response(200, text="\n".join(words))

    provider = WordListProvider(cache, url=URL, client=_client(handler))
    result = provider.get_word_list()

    assert result == words[:5000]
    assert json.loads(cache.get(WORD_LIST_CACHE_KEY)) == words[:5000]


def test_malformed_url_returns_fallback_words():
    provider = WordListProvider(InMemoryTTLCache(), url="https://exa mple.com/\x00words")

    assert provider.get_word_list() == list(FALLBACK_WORDS)


def test_empty_or_non_list_cache_entry_is_treated_as_a_miss():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="gear\nvolt\n")

    for stale in ("[]", "5", '{"a": 1}', "not json"):
        cache = InMemoryTTLCache()
        cache.put(WORD_LIST_CACHE_KEY, stale, 60)

        provider = WordListProvider(cache, url=URL, client=_client(handler))

        assert provider.get_word_list() == ["gear", "volt"]
        assert json.loads(cache.get(WORD_LIST_CACHE_KEY)) == ["gear", "volt"]
    assert len(calls) == 4
