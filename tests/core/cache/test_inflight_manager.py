"""Tests for InFlightManager."""

from __future__ import annotations

import asyncio

import pytest

from core.cache.inflight_manager import InFlightManager
from core.trans.interface import TranslationProviderError
from models.cache_models import CacheKey

KEY = CacheKey("hello", None, "fr")


@pytest.fixture
async def inflight_manager() -> InFlightManager:
    """Create and initialize InFlightManager."""
    manager = InFlightManager()
    await manager.component_load()
    return manager


@pytest.mark.asyncio
async def test_first_caller_becomes_owner(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    assert inflight_manager.is_inflight(KEY)
    assert inflight_manager.inflight_count == 1


@pytest.mark.asyncio
async def test_waiters_receive_stored_result(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None

    waiters: list[asyncio.Task[str | None]] = [
        asyncio.create_task(inflight_manager.mark_inflight_start(KEY)) for _ in range(3)
    ]
    await asyncio.sleep(0)
    await inflight_manager.store_inflight_result(KEY, "bonjour")

    assert await asyncio.gather(*waiters) == ["bonjour"] * 3
    assert inflight_manager.inflight_count == 0


@pytest.mark.asyncio
async def test_waiters_receive_stored_exception(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    waiter: asyncio.Task[str | None] = asyncio.create_task(inflight_manager.mark_inflight_start(KEY))
    await asyncio.sleep(0)

    error = TranslationProviderError("failed")
    await inflight_manager.store_inflight_exception(KEY, error)

    with pytest.raises(TranslationProviderError) as exc_info:
        await waiter
    assert exc_info.value is error
    assert inflight_manager.inflight_count == 0


@pytest.mark.asyncio
async def test_exception_without_waiters_completes_future(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    future: asyncio.Future[str] = inflight_manager._inflight[KEY]  # noqa: SLF001

    await inflight_manager.store_inflight_exception(KEY, TranslationProviderError("failed"))

    assert future.done()
    assert isinstance(future.exception(), TranslationProviderError)


@pytest.mark.asyncio
async def test_cancel_inflight_cancels_waiters(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    waiter: asyncio.Task[str | None] = asyncio.create_task(inflight_manager.mark_inflight_start(KEY))
    await asyncio.sleep(0)

    await inflight_manager.cancel_inflight(KEY)

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert not inflight_manager.is_inflight(KEY)


@pytest.mark.asyncio
async def test_cancelled_waiter_leaves_shared_future_pending(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    shared_future: asyncio.Future[str] = inflight_manager._inflight[KEY]  # noqa: SLF001

    waiter: asyncio.Task[str | None] = asyncio.create_task(inflight_manager.mark_inflight_start(KEY))
    await asyncio.sleep(0)
    waiter.cancel()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert shared_future.cancelled() is False
    assert inflight_manager.is_inflight(KEY)


@pytest.mark.asyncio
async def test_key_is_released_after_result(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    await inflight_manager.store_inflight_result(KEY, "bonjour")

    assert await inflight_manager.mark_inflight_start(KEY) is None


@pytest.mark.asyncio
async def test_distinct_keys_do_not_share_futures(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    assert await inflight_manager.mark_inflight_start(CacheKey("hello", "en", "fr")) is None

    assert inflight_manager.inflight_count == 2


@pytest.mark.asyncio
async def test_store_result_without_registration_logs_warning(
    inflight_manager: InFlightManager, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("WARNING")

    await inflight_manager.store_inflight_result(KEY, "bonjour")

    assert "No in-flight future found" in caplog.text


@pytest.mark.asyncio
async def test_teardown_cancels_pending_waiters(inflight_manager: InFlightManager) -> None:
    assert await inflight_manager.mark_inflight_start(KEY) is None
    waiter: asyncio.Task[str | None] = asyncio.create_task(inflight_manager.mark_inflight_start(KEY))
    await asyncio.sleep(0)

    await inflight_manager.component_teardown()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert inflight_manager.inflight_count == 0
    assert inflight_manager.is_initialized is False
