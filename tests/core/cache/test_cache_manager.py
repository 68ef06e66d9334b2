"""Unit tests for core.cache.manager module."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from core.cache.manager import CACHE_MISS, TranslationCacheManager
from core.trans.interface import TranslationProviderError, TranslationTimeoutError
from models.cache_models import CacheKey
from models.config_models import Config

if TYPE_CHECKING:
    from pathlib import Path

    from models.cache_models import CacheStatistics


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now: float = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Fetcher returning "<tgt>:<text>" and counting calls."""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls: list[tuple[str, str | None, str]] = []
        self.delay: float = delay

    async def __call__(self, text: str, source_lang: str | None, target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        if self.delay:
            await asyncio.sleep(self.delay)
        return f"{target_lang}:{text}"


def _make_config(
    *, ttl: float = 60.0, max_entries: int = 100, cleanup_interval: float = 0.0, fetch_timeout: float = 5.0
) -> Config:
    config = Config()
    config.CACHE.TTL_SECONDS = ttl
    config.CACHE.MAX_ENTRIES = max_entries
    config.CACHE.CLEANUP_INTERVAL = cleanup_interval
    config.CACHE.FETCH_TIMEOUT = fetch_timeout
    return config


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TranslationCacheManager:
    return TranslationCacheManager(_make_config(), clock=clock)


def test_init_rejects_non_positive_policy() -> None:
    with pytest.raises(ValueError, match="must be positive"):
        TranslationCacheManager(_make_config(ttl=0))
    with pytest.raises(ValueError, match="must be positive"):
        TranslationCacheManager(_make_config(max_entries=0))


@pytest.mark.asyncio
async def test_lookup_on_empty_cache_is_miss(cache: TranslationCacheManager) -> None:
    assert await cache.lookup("hello", None, "fr") is CACHE_MISS


@pytest.mark.asyncio
async def test_fetched_translation_is_served_from_cache(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher()

    first: str = await cache.translate_or_fetch("hello", "en", "fr", fetcher)
    second: str = await cache.translate_or_fetch("hello", "en", "fr", fetcher)

    assert first == second == "fr:hello"
    assert fetcher.calls == [("hello", "en", "fr")]
    assert await cache.lookup("hello", "en", "fr") == "fr:hello"


@pytest.mark.asyncio
async def test_auto_source_is_distinct_from_explicit_source(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher()

    await cache.translate_or_fetch("hello", None, "fr", fetcher)

    assert await cache.lookup("hello", "en", "fr") is CACHE_MISS
    assert await cache.lookup("hello", "", "fr") is CACHE_MISS

    await cache.translate_or_fetch("hello", "en", "fr", fetcher)
    await cache.translate_or_fetch("hello", "", "fr", fetcher)

    assert len(fetcher.calls) == 3
    assert len(cache) == 3


@pytest.mark.asyncio
async def test_keys_are_not_normalized(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher()

    await cache.translate_or_fetch("Hello", None, "fr", fetcher)

    assert await cache.lookup("hello", None, "fr") is CACHE_MISS
    assert await cache.lookup("Hello ", None, "fr") is CACHE_MISS
    assert await cache.lookup("Hello", None, "FR") is CACHE_MISS
    assert CacheKey("Hello", None, "fr") in cache


@pytest.mark.asyncio
async def test_concurrent_identical_requests_fetch_once(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher(delay=0.01)

    results: list[str] = await asyncio.gather(
        *(cache.translate_or_fetch("hello", None, "de", fetcher) for _ in range(10))
    )

    assert len(fetcher.calls) == 1
    assert results == ["de:hello"] * 10
    assert cache.inflight_manager.inflight_count == 0


@pytest.mark.asyncio
async def test_concurrent_different_keys_fetch_independently(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher(delay=0.01)

    results: list[str] = await asyncio.gather(
        cache.translate_or_fetch("hello", None, "de", fetcher),
        cache.translate_or_fetch("hello", None, "fr", fetcher),
        cache.translate_or_fetch("bye", None, "de", fetcher),
    )

    assert results == ["de:hello", "fr:hello", "de:bye"]
    assert len(fetcher.calls) == 3


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached_and_is_retried(cache: TranslationCacheManager) -> None:
    attempts: list[int] = []

    async def flaky(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = source_lang, target_lang
        attempts.append(1)
        if len(attempts) == 1:
            msg = "provider down"
            raise TranslationProviderError(msg)
        return text.upper()

    with pytest.raises(TranslationProviderError, match="provider down"):
        await cache.translate_or_fetch("hello", None, "fr", flaky)

    assert await cache.lookup("hello", None, "fr") is CACHE_MISS
    assert cache.inflight_manager.inflight_count == 0

    assert await cache.translate_or_fetch("hello", None, "fr", flaky) == "HELLO"
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_failure_is_delivered_to_every_waiter(cache: TranslationCacheManager) -> None:
    calls: list[int] = []
    error = TranslationProviderError("quota")

    async def failing(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = text, source_lang, target_lang
        calls.append(1)
        await asyncio.sleep(0.01)
        raise error

    results: list[str | BaseException] = await asyncio.gather(
        *(cache.translate_or_fetch("hello", None, "fr", failing) for _ in range(5)),
        return_exceptions=True,
    )

    assert len(calls) == 1
    assert all(result is error for result in results)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_unexpected_fetcher_error_is_classified_as_provider_error(cache: TranslationCacheManager) -> None:
    async def broken(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = text, source_lang, target_lang
        msg = "boom"
        raise RuntimeError(msg)

    with pytest.raises(TranslationProviderError) as exc_info:
        await cache.translate_or_fetch("hello", None, "fr", broken)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_non_string_result_is_provider_error(cache: TranslationCacheManager) -> None:
    async def wrong_type(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = text, source_lang, target_lang
        return None  # type: ignore[return-value]

    with pytest.raises(TranslationProviderError, match="instead of str"):
        await cache.translate_or_fetch("hello", None, "fr", wrong_type)

    assert len(cache) == 0


@pytest.mark.asyncio
async def test_slow_fetch_times_out_for_owner_and_waiters(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(fetch_timeout=0.01), clock=clock)

    async def slow(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = source_lang, target_lang
        await asyncio.sleep(1)
        return text

    results: list[str | BaseException] = await asyncio.gather(
        *(cache.translate_or_fetch("hello", None, "fr", slow) for _ in range(3)),
        return_exceptions=True,
    )

    assert all(isinstance(result, TranslationTimeoutError) for result in results)
    assert len(cache) == 0
    assert cache.inflight_manager.inflight_count == 0


@pytest.mark.asyncio
async def test_owner_cancellation_is_observed_by_waiters(cache: TranslationCacheManager) -> None:
    gate = asyncio.Event()

    async def gated(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = source_lang, target_lang
        await gate.wait()
        return text

    owner: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("hello", None, "fr", gated))
    await asyncio.sleep(0)
    waiter: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("hello", None, "fr", gated))
    await asyncio.sleep(0)

    owner.cancel()

    with pytest.raises(asyncio.CancelledError):
        await owner
    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert len(cache) == 0
    assert cache.inflight_manager.inflight_count == 0

    gate.set()
    assert await cache.translate_or_fetch("hello", None, "fr", gated) == "hello"


@pytest.mark.asyncio
async def test_waiter_cancellation_does_not_cancel_shared_fetch(cache: TranslationCacheManager) -> None:
    gate = asyncio.Event()

    async def gated(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = source_lang, target_lang
        await gate.wait()
        return text.upper()

    owner: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("hello", None, "fr", gated))
    await asyncio.sleep(0)
    waiter: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("hello", None, "fr", gated))
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    gate.set()
    assert await owner == "HELLO"
    assert await cache.lookup("hello", None, "fr") == "HELLO"


class FetchAbortedError(BaseException):
    """Non-Exception abort raised from inside a fetcher."""


@pytest.mark.asyncio
async def test_aborted_fetch_releases_key_for_retry(cache: TranslationCacheManager) -> None:
    async def aborting_fetcher(text: str, source_lang: str | None, target_lang: str) -> str:
        _ = text, source_lang, target_lang
        await asyncio.sleep(0.01)
        raise FetchAbortedError

    owner: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("x", None, "fr", aborting_fetcher))
    await asyncio.sleep(0)
    waiter: asyncio.Task[str] = asyncio.create_task(cache.translate_or_fetch("x", None, "fr", CountingFetcher()))
    await asyncio.sleep(0)

    with pytest.raises(FetchAbortedError):
        await owner
    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert cache.inflight_manager.inflight_count == 0

    fetcher = CountingFetcher()
    assert await asyncio.wait_for(cache.translate_or_fetch("x", None, "fr", fetcher), timeout=1.0) == "fr:x"
    assert fetcher.calls == [("x", None, "fr")]


@pytest.mark.asyncio
async def test_lookup_expires_entry_after_ttl(cache: TranslationCacheManager, clock: FakeClock) -> None:
    await cache.translate_or_fetch("hello", None, "fr", CountingFetcher())

    clock.advance(60.0)
    assert await cache.lookup("hello", None, "fr") == "fr:hello"

    clock.advance(0.001)
    assert await cache.lookup("hello", None, "fr") is CACHE_MISS
    assert len(cache) == 0

    stats: CacheStatistics = await cache.get_cache_statistics()
    assert stats.expired == 1


@pytest.mark.asyncio
async def test_expired_entry_is_replaced_with_fresh_fetch(cache: TranslationCacheManager, clock: FakeClock) -> None:
    fetcher = CountingFetcher()
    await cache.translate_or_fetch("hello", None, "fr", fetcher)

    clock.advance(120.0)
    await cache.translate_or_fetch("hello", None, "fr", fetcher)

    assert len(fetcher.calls) == 2
    clock.advance(30.0)
    assert await cache.lookup("hello", None, "fr") == "fr:hello"


@pytest.mark.asyncio
async def test_evict_expired_removes_only_stale_entries(cache: TranslationCacheManager, clock: FakeClock) -> None:
    fetcher = CountingFetcher()
    await cache.translate_or_fetch("old", None, "fr", fetcher)
    clock.advance(40.0)
    await cache.translate_or_fetch("new", None, "fr", fetcher)

    assert await cache.evict_expired(now=clock.now + 10.0) == 0
    assert await cache.evict_expired(now=clock.now + 30.0) == 1

    assert await cache.lookup("old", None, "fr") is CACHE_MISS
    assert await cache.lookup("new", None, "fr") == "fr:new"


@pytest.mark.asyncio
async def test_evict_expired_uses_clock_by_default(cache: TranslationCacheManager, clock: FakeClock) -> None:
    await cache.translate_or_fetch("hello", None, "fr", CountingFetcher())
    clock.advance(61.0)

    assert await cache.evict_expired() == 1
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_capacity_evicts_least_recently_inserted(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(max_entries=3), clock=clock)
    fetcher = CountingFetcher()

    for text in ("a", "b", "c", "d"):
        await cache.translate_or_fetch(text, None, "fr", fetcher)

    assert len(cache) == 3
    assert await cache.lookup("a", None, "fr") is CACHE_MISS
    for text in ("b", "c", "d"):
        assert await cache.lookup(text, None, "fr") == f"fr:{text}"

    stats: CacheStatistics = await cache.get_cache_statistics()
    assert stats.evicted_lru == 1


@pytest.mark.asyncio
async def test_lookup_hit_protects_entry_from_eviction(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(max_entries=3), clock=clock)
    fetcher = CountingFetcher()
    for text in ("a", "b", "c"):
        await cache.translate_or_fetch(text, None, "fr", fetcher)

    assert await cache.lookup("a", None, "fr") == "fr:a"
    await cache.translate_or_fetch("d", None, "fr", fetcher)

    assert CacheKey("a", None, "fr") in cache
    assert CacheKey("b", None, "fr") not in cache
    assert len(cache) == 3


@pytest.mark.asyncio
async def test_capacity_drops_expired_entries_before_live_ones(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(ttl=60.0, max_entries=2), clock=clock)
    fetcher = CountingFetcher()

    await cache.translate_or_fetch("a", None, "fr", fetcher)
    clock.advance(50.0)
    await cache.translate_or_fetch("b", None, "fr", fetcher)
    clock.advance(5.0)
    assert await cache.lookup("a", None, "fr") == "fr:a"

    # "a" is now expired but sits at the most recently used end.
    clock.advance(15.0)
    await cache.translate_or_fetch("c", None, "fr", fetcher)

    assert await cache.lookup("b", None, "fr") == "fr:b"
    assert await cache.lookup("c", None, "fr") == "fr:c"
    assert CacheKey("a", None, "fr") not in cache
    assert len(cache) == 2

    stats: CacheStatistics = await cache.get_cache_statistics()
    assert stats.evicted_lru == 0
    assert stats.expired == 1


@pytest.mark.asyncio
async def test_capacity_counts_only_live_entries(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(ttl=60.0, max_entries=2), clock=clock)
    fetcher = CountingFetcher()

    await cache.translate_or_fetch("a", None, "fr", fetcher)
    await cache.translate_or_fetch("b", None, "fr", fetcher)
    clock.advance(30.0)
    await cache.translate_or_fetch("c", None, "fr", fetcher)

    assert CacheKey("a", None, "fr") not in cache
    assert await cache.lookup("b", None, "fr") == "fr:b"
    assert await cache.lookup("c", None, "fr") == "fr:c"


@pytest.mark.asyncio
async def test_statistics_report_usage(cache: TranslationCacheManager) -> None:
    fetcher = CountingFetcher()
    await cache.translate_or_fetch("hello", None, "fr", fetcher)
    await cache.translate_or_fetch("hello", None, "fr", fetcher)
    await cache.translate_or_fetch("hello", "en", "de", fetcher)
    await cache.lookup("missing", None, "fr")

    stats: CacheStatistics = await cache.get_cache_statistics()

    assert stats.total_entries == 2
    assert stats.total_hits == 1
    assert stats.total_misses == 3
    assert stats.fetch_count == 2
    assert stats.fetch_failures == 0
    assert stats.language_pair_distribution == {"auto>fr": 1, "en>de": 1}
    assert stats.oldest_entry is not None
    assert stats.newest_entry is not None
    assert stats.hit_rate == pytest.approx(0.25)


@pytest.mark.asyncio
async def test_statistics_of_empty_cache(cache: TranslationCacheManager) -> None:
    stats: CacheStatistics = await cache.get_cache_statistics()

    assert stats.total_entries == 0
    assert stats.oldest_entry is None
    assert stats.hit_rate == 0.0


@pytest.mark.asyncio
async def test_export_cache_detailed_sorts_by_hit_count(cache: TranslationCacheManager, tmp_path: Path) -> None:
    fetcher = CountingFetcher()
    await cache.translate_or_fetch("rare", None, "fr", fetcher)
    await cache.translate_or_fetch("popular", "en", "fr", fetcher)
    await cache.lookup("popular", "en", "fr")
    await cache.lookup("popular", "en", "fr")

    output: Path = tmp_path / "export.txt"
    assert await cache.export_cache_detailed(output) is True

    text: str = output.read_text(encoding="utf-8")
    assert text.startswith("Translation Cache Detailed Export")
    assert text.index("Source: popular") < text.index("Source: rare")
    assert "Languages: auto -> fr" in text
    assert "Hit Count: 2" in text


@pytest.mark.asyncio
async def test_export_cache_detailed_reports_write_failure(cache: TranslationCacheManager, tmp_path: Path) -> None:
    assert await cache.export_cache_detailed(tmp_path / "missing" / "export.txt") is False


@pytest.mark.asyncio
async def test_clear_drops_entries(cache: TranslationCacheManager) -> None:
    await cache.translate_or_fetch("hello", None, "fr", CountingFetcher())

    assert cache.clear() == 1
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_maintenance_task_evicts_expired_entries(clock: FakeClock) -> None:
    cache = TranslationCacheManager(_make_config(cleanup_interval=0.01), clock=clock)
    await cache.translate_or_fetch("hello", None, "fr", CountingFetcher())
    clock.advance(61.0)

    await cache.component_load()
    try:
        await asyncio.sleep(0.05)
        assert len(cache) == 0
    finally:
        await cache.component_teardown()
