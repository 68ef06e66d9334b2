"""Language metadata for presenting language choices to chat users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__: list[str] = ["POPULAR_LANGUAGES", "LanguageInfo", "display_name", "find_language"]


@dataclass(frozen=True)
class LanguageInfo:
    """Display information for a language.

    Attributes:
        code (str): Language code passed to the translator.
        name (str): English name of the language.
        flag (str): Flag emoji shown next to the name.
    """

    code: str
    name: str
    flag: str

    def __str__(self) -> str:
        return f"{self.flag} {self.name}"


POPULAR_LANGUAGES: Final[tuple[LanguageInfo, ...]] = (
    LanguageInfo("en", "English", "🇬🇧"),
    LanguageInfo("fa", "Persian", "🇮🇷"),
    LanguageInfo("ru", "Russian", "🇷🇺"),
    LanguageInfo("es", "Spanish", "🇪🇸"),
    LanguageInfo("fr", "French", "🇫🇷"),
    LanguageInfo("de", "German", "🇩🇪"),
    LanguageInfo("ar", "Arabic", "🇸🇦"),
    LanguageInfo("zh", "Chinese", "🇨🇳"),
    LanguageInfo("ja", "Japanese", "🇯🇵"),
    LanguageInfo("ko", "Korean", "🇰🇷"),
)


def find_language(code: str | None) -> LanguageInfo | None:
    """Look up a popular language by code, ignoring case."""
    if not code:
        return None
    lowered: str = code.lower()
    for lang in POPULAR_LANGUAGES:
        if lang.code == lowered:
            return lang
    return None


def display_name(code: str) -> str:
    """Return "<flag> <name>" for a popular language, or the code itself."""
    lang: LanguageInfo | None = find_language(code)
    return str(lang) if lang is not None else code
