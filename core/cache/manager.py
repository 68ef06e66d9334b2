"""Translation cache manager.

Memoizes translations in memory, keyed exactly by (text, source language, target language).
Provides lookup, single-flight fetching on a miss, TTL expiry, LRU capacity control, statistics and export.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections import Counter, OrderedDict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from core.cache.inflight_manager import InFlightManager
from core.trans.interface import TranslationProviderError, TranslationTimeoutError
from models.cache_models import CacheKey, CacheStatistics, TranslationCacheEntry
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from pathlib import Path

    from config.loader import Config

__all__: list[str] = ["CACHE_MISS", "Fetcher", "TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type Fetcher = Callable[[str, str | None, str], Awaitable[str]]

CACHE_MISS: Final[None] = None


class TranslationCacheManager:
    """In-memory memoization cache for translations.

    Entries live for `[CACHE] TTL_SECONDS` after creation and at most `[CACHE] MAX_ENTRIES` are kept; beyond
    that the least recently used entry is evicted. A lookup hit or an insert counts as a use.

    On a miss `translate_or_fetch` calls the fetcher once per key, however many callers ask for the same key
    while that fetch is running. Failed fetches are never cached.

    Args:
        config (Config): Application configuration.
        inflight_manager (InFlightManager | None): Shared in-flight manager; a private one is created if omitted.
        clock (Callable[[], float]): Source of epoch seconds.
    """

    def __init__(
        self,
        config: Config,
        inflight_manager: InFlightManager | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config: Config = config
        self._ttl: float = float(config.CACHE.TTL_SECONDS)
        self._max_entries: int = int(config.CACHE.MAX_ENTRIES)
        self._cleanup_interval: float = float(config.CACHE.CLEANUP_INTERVAL)
        self._fetch_timeout: float = float(config.CACHE.FETCH_TIMEOUT)
        if self._ttl <= 0 or self._max_entries <= 0:
            msg: str = f"TTL and capacity must be positive: ttl={self._ttl}, max_entries={self._max_entries}"
            raise ValueError(msg)

        self._clock: Callable[[], float] = clock
        self._inflight: InFlightManager = inflight_manager if inflight_manager is not None else InFlightManager()
        # Ordered from least to most recently used.
        self._entries: OrderedDict[CacheKey, TranslationCacheEntry] = OrderedDict()
        self._hit_counts: dict[CacheKey, int] = {}
        self._maintenance_task: asyncio.Task[None] | None = None

        self._total_hits: int = 0
        self._total_misses: int = 0
        self._fetch_count: int = 0
        self._fetch_failures: int = 0
        self._evicted_lru: int = 0
        self._expired: int = 0
        logger.debug("TranslationCacheManager instance created")

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def inflight_manager(self) -> InFlightManager:
        return self._inflight

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._entries

    async def component_load(self) -> None:
        """Start the in-flight manager and the periodic expiry task."""
        logger.info("TranslationCacheManager initialization started")
        await self._inflight.component_load()
        if self._maintenance_task is None and self._cleanup_interval > 0:
            self._maintenance_task = asyncio.create_task(self._maintenance_loop(), name="cache_maintenance_task")
        logger.info("TranslationCacheManager initialized successfully")

    async def component_teardown(self) -> None:
        """Stop the expiry task, cancel pending fetches and drop all entries."""
        logger.info("TranslationCacheManager shutdown started")
        if self._maintenance_task is not None:
            self._maintenance_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._maintenance_task
            self._maintenance_task = None
        await self._inflight.component_teardown()
        self.clear()
        logger.info("TranslationCacheManager shutdown completed")

    async def _maintenance_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            await self.evict_expired()

    async def lookup(self, text: str, source_lang: str | None, target_lang: str) -> str | None:
        """Return the cached translation for the exact key.

        Args:
            text (str): Source text as submitted.
            source_lang (str | None): Source language code, or None for auto-detection.
            target_lang (str): Target language code.

        Returns:
            str | None: The translation, or CACHE_MISS (None) if there is no live entry.
        """
        cache_key = CacheKey(text, source_lang, target_lang)
        entry: TranslationCacheEntry | None = self._search_translation_entry(cache_key)
        if entry is None:
            self._total_misses += 1
            return CACHE_MISS
        self._total_hits += 1
        return entry.translated

    async def translate_or_fetch(
        self,
        text: str,
        source_lang: str | None,
        target_lang: str,
        fetcher: Fetcher,
    ) -> str:
        """Return the cached translation, fetching and caching it on a miss.

        Concurrent calls for the same key share one fetch and all receive its result or its exception.

        Args:
            text (str): Source text as submitted.
            source_lang (str | None): Source language code, or None for auto-detection.
            target_lang (str): Target language code.
            fetcher (Fetcher): Called as `fetcher(text, source_lang, target_lang)` on a miss.

        Returns:
            str: The translated text.

        Raises:
            TranslationProviderError: If the fetch failed. Nothing is cached and a later call retries.
            TranslationTimeoutError: If the fetch did not finish within `[CACHE] FETCH_TIMEOUT`.
            asyncio.CancelledError: If the owning fetch or this call was cancelled.
        """
        cache_key = CacheKey(text, source_lang, target_lang)
        entry: TranslationCacheEntry | None = self._search_translation_entry(cache_key)
        if entry is not None:
            self._total_hits += 1
            return entry.translated
        self._total_misses += 1

        inflight_result: str | None = await self._inflight.mark_inflight_start(cache_key)
        if inflight_result is not None:
            return inflight_result

        # Owner of the fetch. A previous owner may have stored the entry just before we registered.
        entry = self._search_translation_entry(cache_key)
        if entry is not None:
            await self._inflight.store_inflight_result(cache_key, entry.translated)
            return entry.translated

        self._fetch_count += 1
        try:
            translated: str = await self._call_fetcher(cache_key, fetcher)
        except asyncio.CancelledError:
            self._fetch_failures += 1
            logger.warning("Translation fetch cancelled for key: %s", cache_key.digest[:16])
            await self._inflight.cancel_inflight(cache_key)
            raise
        except TranslationProviderError as err:
            self._fetch_failures += 1
            logger.warning("Translation fetch failed for key: %s: %s", cache_key.digest[:16], err)
            await self._inflight.store_inflight_exception(cache_key, err)
            raise
        except BaseException:
            self._fetch_failures += 1
            logger.warning("Translation fetch aborted for key: %s", cache_key.digest[:16])
            await self._inflight.cancel_inflight(cache_key)
            raise

        self._register_translation_cache(cache_key, translated)
        await self._inflight.store_inflight_result(cache_key, translated)
        return translated

    async def _call_fetcher(self, cache_key: CacheKey, fetcher: Fetcher) -> str:
        """Run the fetcher under the fetch timeout and classify its failures as provider errors."""
        try:
            translated = await asyncio.wait_for(
                fetcher(cache_key.text, cache_key.source_lang, cache_key.target_lang),
                timeout=self._fetch_timeout if self._fetch_timeout > 0 else None,
            )
        except TranslationProviderError:
            raise
        except TimeoutError as err:
            msg: str = f"Translation fetch timed out after {self._fetch_timeout} seconds"
            raise TranslationTimeoutError(msg) from err
        except Exception as err:  # noqa: BLE001
            msg = f"Translation fetch failed: {err}"
            raise TranslationProviderError(msg) from err

        if not isinstance(translated, str):
            msg = f"Translator returned {type(translated).__name__} instead of str"
            raise TranslationProviderError(msg)
        return translated

    def _search_translation_entry(self, cache_key: CacheKey) -> TranslationCacheEntry | None:
        """Find a live entry, dropping it if expired and marking it used if not."""
        entry: TranslationCacheEntry | None = self._entries.get(cache_key)
        if entry is None:
            logger.debug("Cache miss for key: %s", cache_key.digest[:16])
            return None

        if entry.age(self._clock()) > self._ttl:
            self._delete_entry(cache_key)
            self._expired += 1
            logger.debug("Cache entry expired for key: %s", cache_key.digest[:16])
            return None

        self._entries.move_to_end(cache_key)
        self._hit_counts[cache_key] = self._hit_counts.get(cache_key, 0) + 1
        logger.debug("Cache hit for key: %s (hit_count: %d)", cache_key.digest[:16], self._hit_counts[cache_key])
        return entry

    def _register_translation_cache(self, cache_key: CacheKey, translated: str) -> None:
        # Any stale entry is replaced, never updated in place.
        self._delete_entry(cache_key)
        self._entries[cache_key] = TranslationCacheEntry(
            text=cache_key.text,
            source_lang=cache_key.source_lang,
            target_lang=cache_key.target_lang,
            translated=translated,
            timestamp=self._clock(),
        )
        self._hit_counts[cache_key] = 0
        logger.debug("Translation cached for key: %s", cache_key.digest[:16])
        self._enforce_capacity_limit()

    def _enforce_capacity_limit(self) -> None:
        if len(self._entries) <= self._max_entries:
            return
        # Only live entries count against the limit.
        self._remove_expired(self._clock())

        evicted: int = 0
        while len(self._entries) > self._max_entries:
            cache_key, _ = self._entries.popitem(last=False)
            self._hit_counts.pop(cache_key, None)
            evicted += 1
        if evicted:
            self._evicted_lru += evicted
            logger.info("Deleted %d LRU translation cache entries", evicted)

    def _delete_entry(self, cache_key: CacheKey) -> None:
        self._entries.pop(cache_key, None)
        self._hit_counts.pop(cache_key, None)

    async def evict_expired(self, now: float | None = None) -> int:
        """Remove every entry older than the TTL.

        Args:
            now (float | None): Reference time in epoch seconds; the clock is read if omitted.

        Returns:
            int: Number of entries removed.
        """
        return self._remove_expired(self._clock() if now is None else now)

    def _remove_expired(self, current: float) -> int:
        expired_keys: list[CacheKey] = [
            cache_key for cache_key, entry in self._entries.items() if entry.age(current) > self._ttl
        ]
        for cache_key in expired_keys:
            self._delete_entry(cache_key)

        self._expired += len(expired_keys)
        if expired_keys:
            logger.info("Deleted %d expired translation cache entries", len(expired_keys))
        return len(expired_keys)

    def clear(self) -> int:
        """Drop every entry. Statistics counters are kept.

        Returns:
            int: Number of entries removed.
        """
        removed: int = len(self._entries)
        self._entries.clear()
        self._hit_counts.clear()
        if removed:
            logger.info("Cleared %d translation cache entries", removed)
        return removed

    async def get_cache_statistics(self) -> CacheStatistics:
        """Get cache statistics.

        Returns:
            CacheStatistics: Cache statistics data.
        """
        timestamps: list[float] = [entry.timestamp for entry in self._entries.values()]
        pairs: Counter[str] = Counter(cache_key.language_pair for cache_key in self._entries)

        return CacheStatistics(
            total_entries=len(self._entries),
            total_hits=self._total_hits,
            total_misses=self._total_misses,
            fetch_count=self._fetch_count,
            fetch_failures=self._fetch_failures,
            evicted_lru=self._evicted_lru,
            expired=self._expired,
            language_pair_distribution=dict(pairs),
            oldest_entry=datetime.fromtimestamp(min(timestamps), tz=UTC) if timestamps else None,
            newest_entry=datetime.fromtimestamp(max(timestamps), tz=UTC) if timestamps else None,
        )

    async def export_cache_detailed(self, output_path: Path) -> bool:
        """Export detailed cache data to file sorted by hit count.

        Args:
            output_path (Path): Output file path.

        Returns:
            bool: True if export succeeded, False otherwise.
        """
        rows: list[TranslationCacheEntry] = sorted(
            self._entries.values(),
            key=lambda entry: (self._hit_counts.get(entry.key, 0), entry.timestamp),
            reverse=True,
        )

        try:
            with output_path.open("w", encoding="utf-8") as f:
                f.write("Translation Cache Detailed Export\n")
                f.write("=" * 80 + "\n\n")

                for entry in rows:
                    f.write(f"Cache Key: {entry.key.digest}\n")
                    f.write(f"Source: {entry.text}\n")
                    f.write(f"Languages: {entry.source_lang or 'auto'} -> {entry.target_lang}\n")
                    f.write(f"Translation: {entry.translated}\n")
                    f.write(f"Hit Count: {self._hit_counts.get(entry.key, 0)}\n")
                    f.write(f"Created: {datetime.fromtimestamp(entry.timestamp, tz=UTC).isoformat()}\n")
                    f.write("-" * 80 + "\n")

            logger.info("Cache data exported to: %s", output_path)

        except OSError as err:
            logger.error("Error exporting cache data: %s", err)
            return False
        else:
            return True
