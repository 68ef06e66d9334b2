"""Translation cache package.

Provides in-memory memoization of translation results and single-flight fetching on a miss.
"""

from __future__ import annotations

from core.cache.inflight_manager import InFlightManager
from core.cache.manager import CACHE_MISS, Fetcher, TranslationCacheManager

__all__: list[str] = ["CACHE_MISS", "Fetcher", "InFlightManager", "TranslationCacheManager"]
