from __future__ import annotations

import hashlib
import json

from models.re_models import LANGUAGE_CODE_PATTERN

__all__: list[str] = ["StringUtils"]


class StringUtils:
    """Utility class for string handling shared by the command layer and the translation cache."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Return the value as a string, or an empty string for None.

        Note: Does not strip; command arguments keep their significant whitespace.

        Args:
            value (str | None): The value to convert.

        Returns:
            str: The value as a string.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def truncate(value: str, limit: int, *, suffix: str = "...") -> str:
        """Shorten a string to at most `limit` characters, marking the cut with `suffix`.

        Args:
            value (str): The string to shorten.
            limit (int): Maximum length of the result. Zero or negative disables truncation.
            suffix (str): Marker appended when the string is cut.

        Returns:
            str: The original string, or a shortened copy.
        """
        value = StringUtils.ensure_str(value)
        if limit <= 0 or len(value) <= limit:
            return value
        if limit <= len(suffix):
            return value[:limit]
        return value[: limit - len(suffix)] + suffix

    @staticmethod
    def is_language_code(value: str | None) -> bool:
        """Check whether the value looks like a language tag ("en", "zh-CN", "sr-Latn").

        The check is syntactic only; whether a provider supports the language is decided by the provider.

        Args:
            value (str | None): Candidate language code.

        Returns:
            bool: True for a well-formed, non-empty tag.
        """
        if not isinstance(value, str) or not value:
            return False
        return LANGUAGE_CODE_PATTERN.fullmatch(value) is not None

    @staticmethod
    def generate_hash_key(source_text: str, source_lang: str | None, target_lang: str) -> str:
        """Generate a SHA-256 digest identifying a translation request.

        The parts are JSON-encoded so that an absent source language (null) never collides with any explicit
        code, including the literal string "null" or an empty string.

        Args:
            source_text (str): Exact source text.
            source_lang (str | None): Source language code, or None for auto-detection.
            target_lang (str): Target language code.

        Returns:
            str: Hex digest.
        """
        key_data: str = json.dumps([source_text, source_lang, target_lang], ensure_ascii=False)
        return hashlib.sha256(key_data.encode("utf-8")).hexdigest()
