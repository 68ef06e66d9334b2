"""Chat message handling utilities for Converslation.

This package provides the transport-agnostic chat command handler and the asynchronous HTTP client used by
translation engines.
"""

from handlers.async_comm import AsyncCommError, AsyncCommTimeoutError, AsyncHttp
from handlers.command_handler import ChatCommandHandler

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
    "ChatCommandHandler",
]
