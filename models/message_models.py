"""Data models for chat messages handed over by a chat transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

__all__: list[str] = ["ChatMessage"]


@dataclass
class ChatMessage:
    """A chat message as received from a transport.

    Attributes:
        user_id (int): Sender identifier.
        content (str): Raw message text.
        chat_id (int | None): Conversation the message came from. None for contexts without a chat,
            such as inline queries, where only the user's fallback preference applies.
        display_name (str): Sender name, used in log output only.
        timestamp (datetime | None): Time the transport received the message.
    """

    user_id: int
    content: str = ""
    chat_id: int | None = None
    display_name: str = ""
    timestamp: datetime | None = field(default=None, compare=False)

    @property
    def is_command(self) -> bool:
        return self.content.lstrip().startswith("/")
