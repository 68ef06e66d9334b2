"""Translation engine management and interfaces.

This package provides translation through pluggable engine implementations, routed through the translation
cache and the user's language preference.
"""

from core.trans.interface import (
    NotSupportedLanguagesError,
    Result,
    TransInterface,
    TranslationProviderError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
    TranslationTimeoutError,
)
from core.trans.manager import TransManager

__all__: list[str] = [
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TransManager",
    "TranslationProviderError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "TranslationTimeoutError",
]
