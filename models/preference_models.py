"""Models for per-user and per-chat language preferences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

__all__: list[str] = ["PreferenceKey", "UserLanguage"]


class PreferenceKey(NamedTuple):
    """Identity of a preference record.

    Attributes:
        user_id (int): User identifier.
        chat_id (int | None): Chat identifier, or None for the user's chat-independent fallback.
    """

    user_id: int
    chat_id: int | None = None

    @property
    def is_fallback(self) -> bool:
        return self.chat_id is None


@dataclass(frozen=True)
class UserLanguage:
    """Language preference of a user, optionally scoped to one chat.

    Attributes:
        user_id (int): User identifier.
        chat_id (int | None): Chat the preference applies to. None makes it the user's fallback for all chats.
        target_language (str): Language that text is translated into.
        source_language (str | None): Language the input is assumed to be in. None means auto-detect.
    """

    user_id: int
    chat_id: int | None
    target_language: str
    source_language: str | None = None

    @property
    def key(self) -> PreferenceKey:
        return PreferenceKey(self.user_id, self.chat_id)
