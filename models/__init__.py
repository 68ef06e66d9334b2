"""Data models for Converslation.

This package contains dataclass definitions for configuration, preferences, chat messages,
translation requests, language metadata, and regular expression patterns used throughout the application.
"""

from __future__ import annotations

from models.config_models import CacheSettings, Config, General, PreferenceSettings, Translation
from models.language_models import POPULAR_LANGUAGES, LanguageInfo, display_name, find_language
from models.message_models import ChatMessage
from models.preference_models import PreferenceKey, UserLanguage
from models.re_models import COMMAND_PATTERN, LANGUAGE_CODE_PATTERN
from models.translation_models import TranslationInfo

__all__: list[str] = [
    "COMMAND_PATTERN",
    "LANGUAGE_CODE_PATTERN",
    "POPULAR_LANGUAGES",
    "CacheSettings",
    "ChatMessage",
    "Config",
    "General",
    "LanguageInfo",
    "PreferenceKey",
    "PreferenceSettings",
    "Translation",
    "TranslationInfo",
    "UserLanguage",
    "display_name",
    "find_language",
]
