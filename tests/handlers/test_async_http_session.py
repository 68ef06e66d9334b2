import logging
from typing import Any

import pytest

from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp


class FakeResponse:
    def __init__(self, content_type: str, body: bytes) -> None:
        self.headers: dict[str, str] = {"Content-Type": content_type}
        self._body: bytes = body

    async def read(self) -> bytes:
        return self._body


@pytest.mark.asyncio
async def test_init_does_not_open_session() -> None:
    http = AsyncHttp()

    assert http.is_open is False
    with pytest.raises(RuntimeError, match="Session is not initialized"):
        _ = http.session


@pytest.mark.asyncio
async def test_context_opens_and_closes_session(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    http = AsyncHttp()

    async with http:
        assert http.is_open is True

    assert http.is_open is False
    assert any("AsyncHttp session initialized" in rec.message for rec in caplog.records)
    assert not any("session already initialized" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_reenter_after_close_logs_session_initialized(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)

    http = AsyncHttp()

    # first context closes the session
    async with http:
        pass

    caplog.clear()

    async with http:
        pass

    assert any("AsyncHttp session initialized" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_initialize_session_twice_logs_already_initialized(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    http = AsyncHttp()

    http.initialize_session()
    caplog.clear()
    http.initialize_session()

    assert any("session already initialized" in rec.message for rec in caplog.records)
    await http.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("content_type", "body", "expected"),
    [
        ("application/json; charset=utf-8", b'{"text": "Bonjour"}', {"text": "Bonjour"}),
        ("text/plain", "Grüße".encode(), "Grüße"),
        ("text/html", b"<p>hi</p>", "<p>hi</p>"),
        ("application/json", b"", None),
    ],
)
async def test_decode_response_by_content_type(content_type: str, body: bytes, expected: Any) -> None:
    http = AsyncHttp()

    assert await http.decode_response(FakeResponse(content_type, body)) == expected  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_decode_response_unknown_content_type() -> None:
    http = AsyncHttp()

    with pytest.raises(AsyncCommInvalidContentTypeError, match="image/png"):
        await http.decode_response(FakeResponse("image/png", b"\x89PNG"))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_add_handler_replaces_existing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    http = AsyncHttp()

    http.add_handler("text/plain", lambda x: x.decode("utf-8").upper())

    assert await http.decode_response(FakeResponse("text/plain", b"hi")) == "HI"  # type: ignore[arg-type]
    assert "already exists" in caplog.text


def test_comm_error_includes_status() -> None:
    err = AsyncCommError("Error response from the server.", status=429)

    assert err.status == 429
    assert str(err) == "Error response from the server.: status='429'"


def test_comm_error_without_status() -> None:
    err = AsyncCommTimeoutError("timeout")

    assert isinstance(err, AsyncCommError)
    assert err.status is None
    assert err.msg == "timeout"
