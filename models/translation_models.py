"""Models for translation-related data.

Defines the TranslationInfo dataclass that carries one translation request through the manager.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__: list[str] = ["TranslationInfo"]


@dataclass
class TranslationInfo:
    """Translation request and result information.

    Attributes:
        content (str): Original text to be translated.
        tgt_lang (str): Target language code for translation.
        src_lang (str | None): Source language code (None for auto-detection).
        translated_text (str): Translation result; empty until translated.
        user_id (int | None): Requesting user, when the request came from a chat user.
        chat_id (int | None): Chat the request came from.
        engine (str): Name of the active engine when the request was served; empty if none is loaded.
    """

    content: str = ""
    tgt_lang: str = ""
    src_lang: str | None = None
    translated_text: str = ""
    user_id: int | None = None
    chat_id: int | None = None
    engine: str = ""
