"""Language preference package.

Stores each user's target and optional source language, per chat or as a chat-independent fallback.
"""

from __future__ import annotations

from core.preference.storage import (
    MemoryPreferenceStorage,
    PreferenceStorage,
    SQLitePreferenceStorage,
    create_preference_storage,
)
from core.preference.store import (
    InvalidLanguageCodeError,
    PreferenceError,
    PreferenceNotFoundError,
    PreferenceStore,
)

__all__: list[str] = [
    "InvalidLanguageCodeError",
    "MemoryPreferenceStorage",
    "PreferenceError",
    "PreferenceNotFoundError",
    "PreferenceStorage",
    "PreferenceStore",
    "SQLitePreferenceStorage",
    "create_preference_storage",
]
