"""Models for translation cache data.

Defines the cache key, cache entries, and cache statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from datetime import datetime

__all__: list[str] = [
    "CacheKey",
    "CacheStatistics",
    "TranslationCacheEntry",
]


@dataclass(frozen=True)
class CacheKey:
    """Exact identity of a cached translation.

    No normalization is applied: text is case- and whitespace-sensitive, and a None source language is a
    distinct value from every explicit code.

    Attributes:
        text (str): Source text as submitted.
        source_lang (str | None): Source language code, or None for auto-detection.
        target_lang (str): Target language code.
    """

    text: str
    source_lang: str | None
    target_lang: str

    @cached_property
    def digest(self) -> str:
        """SHA-256 digest of the key, used to refer to entries in logs and exports. Computed once per key."""
        return StringUtils.generate_hash_key(self.text, self.source_lang, self.target_lang)

    @property
    def language_pair(self) -> str:
        return f"{self.source_lang or 'auto'}>{self.target_lang}"


@dataclass(frozen=True)
class TranslationCacheEntry:
    """Translation cache entry data.

    Entries are immutable; a stale entry is deleted and replaced, never updated.

    Attributes:
        text (str): Source text.
        source_lang (str | None): Source language code (None for auto-detected).
        target_lang (str): Target language code.
        translated (str): Translated text.
        timestamp (float): Creation time as epoch seconds.
    """

    text: str
    source_lang: str | None
    target_lang: str
    translated: str
    timestamp: float

    @property
    def key(self) -> CacheKey:
        return CacheKey(self.text, self.source_lang, self.target_lang)

    def age(self, now: float) -> float:
        return now - self.timestamp


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        total_entries (int): Number of live cache entries.
        total_hits (int): Lookups answered from the cache.
        total_misses (int): Lookups that found no live entry.
        fetch_count (int): Provider calls made on misses.
        fetch_failures (int): Provider calls that failed.
        evicted_lru (int): Entries removed by the capacity policy.
        expired (int): Entries removed because their TTL elapsed.
        language_pair_distribution (dict[str, int]): Live entries per "src>tgt" pair ("auto" for None).
        oldest_entry (datetime | None): Creation time of the oldest live entry.
        newest_entry (datetime | None): Creation time of the newest live entry.
    """

    total_entries: int = 0
    total_hits: int = 0
    total_misses: int = 0
    fetch_count: int = 0
    fetch_failures: int = 0
    evicted_lru: int = 0
    expired: int = 0
    language_pair_distribution: dict[str, int] = field(default_factory=dict)
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None

    @property
    def hit_rate(self) -> float:
        total: int = self.total_hits + self.total_misses
        return self.total_hits / total if total > 0 else 0.0
