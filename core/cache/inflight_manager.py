from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.cache_models import CacheKey


__all__: list[str] = ["InFlightManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class InFlightManager:
    """Manages in-flight translation fetches so that each cache key is fetched at most once at a time.

    The first caller for a key becomes the owner and receives None from `mark_inflight_start`; it must later
    call exactly one of `store_inflight_result`, `store_inflight_exception` or `cancel_inflight`. Every other
    caller for the same key waits on the owner's future and receives the same value or the same exception.

    The lock only guards synchronous updates of the future map and is never held across an await.
    """

    def __init__(self) -> None:
        self._inflight: dict[CacheKey, asyncio.Future[str]] = {}
        self._lock: asyncio.Lock = asyncio.Lock()
        self._is_initialized: bool = False

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def is_inflight(self, cache_key: CacheKey) -> bool:
        return cache_key in self._inflight

    async def component_load(self) -> None:
        """Initialize the in-flight manager component."""
        self._is_initialized = True
        logger.info("InFlightManager initialized successfully")

    async def component_teardown(self) -> None:
        """Teardown the in-flight manager component and cancel pending fetches."""
        self._is_initialized = False
        async with self._lock:
            for fut in self._inflight.values():
                if not fut.done():
                    fut.cancel()
            self._inflight.clear()
        logger.info("InFlightManager torn down and in-flight state cleared")

    async def mark_inflight_start(self, cache_key: CacheKey) -> str | None:
        """Register a fetch for the key, or wait for the one already registered.

        Args:
            cache_key (CacheKey): Key of the translation being fetched.

        Returns:
            str | None: None if the caller is now the owner of the fetch, otherwise the owner's result.

        Raises:
            TranslationProviderError: The exception stored by the owner.
            asyncio.CancelledError: If the owner's fetch was cancelled or the caller itself was cancelled.
        """
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.get(cache_key)
            if fut is None:
                # Not registered: create a Future that the owner will complete.
                loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
                self._inflight[cache_key] = loop.create_future()
                logger.debug("Marked in-flight start for key: %s", cache_key.digest[:16])
                return None
            logger.debug("In-flight translation detected for key: %s", cache_key.digest[:16])

        try:
            # Shielded so that a waiter being cancelled leaves the shared fetch untouched.
            result: str = await asyncio.shield(fut)
        except asyncio.CancelledError:
            if fut.cancelled():
                logger.warning("In-flight translation cancelled for key: %s", cache_key.digest[:16])
            raise

        logger.debug("Received in-flight translation result for key: %s", cache_key.digest[:16])
        return result

    async def store_inflight_result(self, cache_key: CacheKey, result: str) -> None:
        """Resolve the key's future with the fetched translation and unregister it.

        Args:
            cache_key (CacheKey): Key of the translation being fetched.
            result (str): The translated text.
        """
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.pop(cache_key, None)
            if fut and not fut.done():
                fut.set_result(result)
                logger.debug("Set in-flight translation result for key: %s", cache_key.digest[:16])
            else:
                logger.warning(
                    "No in-flight future found or already done for key: %s when storing result",
                    cache_key.digest[:16],
                )

    async def store_inflight_exception(self, cache_key: CacheKey, exc: Exception) -> None:
        """Fail the key's future with the owner's exception and unregister it.

        Args:
            cache_key (CacheKey): Key of the translation being fetched.
            exc (Exception): The exception every waiter should receive.
        """
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.pop(cache_key, None)
            if fut and not fut.done():
                fut.set_exception(exc)
                # The owner re-raises exc itself; with no waiters nobody else retrieves it.
                fut.exception()
                logger.debug("Set in-flight translation exception for key: %s", cache_key.digest[:16])
            else:
                logger.warning(
                    "No in-flight future found or already done for key: %s when storing exception",
                    cache_key.digest[:16],
                )

    async def cancel_inflight(self, cache_key: CacheKey) -> None:
        """Cancel the key's future so that every waiter observes the owner's cancellation.

        Args:
            cache_key (CacheKey): Key of the translation being fetched.
        """
        async with self._lock:
            fut: asyncio.Future[str] | None = self._inflight.pop(cache_key, None)
            if fut and not fut.done():
                fut.cancel()
                logger.debug("Cancelled in-flight translation for key: %s", cache_key.digest[:16])
