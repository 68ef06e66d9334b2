from __future__ import annotations

from typing import TYPE_CHECKING

from core.preference.storage import MemoryPreferenceStorage, PreferenceStorage
from models.preference_models import PreferenceKey, UserLanguage
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = [
    "InvalidLanguageCodeError",
    "PreferenceError",
    "PreferenceNotFoundError",
    "PreferenceStore",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class PreferenceError(Exception):
    """Base class for language preference errors."""


class InvalidLanguageCodeError(PreferenceError, ValueError):
    """A language code is empty or not a well-formed language tag."""


class PreferenceNotFoundError(PreferenceError, LookupError):
    """Neither a chat-specific nor a fallback preference exists for the user."""


class PreferenceStore:
    """Per-user and per-chat language preferences.

    A record with chat_id None is the user's fallback for every chat without its own record.
    Records never expire; they change only through `set_preference` and `clear_preference`.

    Args:
        storage (PreferenceStorage | None): Persistence backend. Defaults to in-memory storage.
    """

    def __init__(self, storage: PreferenceStorage | None = None) -> None:
        self._storage: PreferenceStorage = storage if storage is not None else MemoryPreferenceStorage()

    @property
    def storage(self) -> PreferenceStorage:
        return self._storage

    async def component_load(self) -> None:
        logger.info("PreferenceStore loaded with %d record(s)", len(self._storage.items()))

    async def component_teardown(self) -> None:
        self._storage.close()
        logger.info("PreferenceStore closed")

    @staticmethod
    def _validate_language(value: object, field_name: str) -> None:
        if not StringUtils.is_language_code(value):
            msg: str = f"Invalid language code for {field_name}: {value!r}"
            raise InvalidLanguageCodeError(msg)

    async def set_preference(
        self,
        user_id: int,
        chat_id: int | None,
        target_language: str,
        source_language: str | None = None,
    ) -> UserLanguage:
        """Insert or overwrite the preference for (user_id, chat_id).

        Codes are stored exactly as given.

        Args:
            user_id (int): User identifier.
            chat_id (int | None): Chat identifier, or None for the user's fallback.
            target_language (str): Target language code.
            source_language (str | None): Source language code, or None for auto-detection.

        Returns:
            UserLanguage: The stored record.

        Raises:
            InvalidLanguageCodeError: If a code is invalid. Nothing is stored.
        """
        self._validate_language(target_language, "target_language")
        if source_language is not None:
            self._validate_language(source_language, "source_language")

        record = UserLanguage(
            user_id=user_id,
            chat_id=chat_id,
            target_language=target_language,
            source_language=source_language,
        )
        self._storage.put(record)
        logger.debug(
            "Preference set for user %s in chat %s: %s -> %s",
            user_id,
            chat_id,
            source_language or "auto",
            target_language,
        )
        return record

    async def get_preference(self, user_id: int, chat_id: int | None = None) -> UserLanguage:
        """Return the chat's record for the user, falling back to the user's chat-independent record.

        Raises:
            PreferenceNotFoundError: If neither record exists.
        """
        if chat_id is not None:
            record: UserLanguage | None = self._storage.get(PreferenceKey(user_id, chat_id))
            if record is not None:
                return record

        record = self._storage.get(PreferenceKey(user_id, None))
        if record is not None:
            return record

        msg: str = f"No language preference for user {user_id} (chat: {chat_id})"
        raise PreferenceNotFoundError(msg)

    async def clear_preference(self, user_id: int, chat_id: int | None = None) -> bool:
        """Delete the record for exactly (user_id, chat_id). Clearing a missing record is not an error.

        Returns:
            bool: True if a record was removed.
        """
        removed: bool = self._storage.delete(PreferenceKey(user_id, chat_id))
        logger.debug("Preference cleared for user %s in chat %s: %s", user_id, chat_id, removed)
        return removed
