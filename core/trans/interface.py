"""This module defines the abstract base class for translation engines and the provider error hierarchy.
It includes the Result data class for translation results, and exceptions raised when a provider call fails.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = [
    "EngineAttributes",
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TranslationProviderError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "TranslationTimeoutError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class EngineAttributes:
    """Engine-specific capabilities and behavior flags.

    Attributes:
        name (str): Name of translation engine. Used in log output only.
        supports_auto_detection (bool): Whether the engine accepts requests without a source language.
    """

    name: str
    supports_auto_detection: bool = True


@dataclass
class Result:
    """Data class for translation results.

    Attributes:
        text (str | None): Translated text. None if the provider returned nothing.
        detected_source_lang (str | None): Detected source language code, when the provider reports one.
        metadata (dict[str, str] | None): Engine-specific metadata (model name, token usage).
    """

    text: str | None = None
    detected_source_lang: str | None = None
    metadata: dict[str, str] | None = None

    def __str__(self) -> str:
        if self.text is None:
            return ""
        return self.text


class TranslationProviderError(Exception):
    """The external translation provider failed to produce a translation."""


class NotSupportedLanguagesError(TranslationProviderError):
    """An unsupported language code was specified."""


class TranslationQuotaExceededError(TranslationProviderError):
    """The provider quota has been exceeded."""


class TranslationRateLimitError(TranslationProviderError):
    """The translation request was rate-limited by the API."""


class TranslationTimeoutError(TranslationProviderError):
    """The provider did not answer within the allowed time."""


class TransInterface(ABC):
    """Abstract base class for translation engines.

    Subclasses register themselves under their distinguished name when they are defined, and
    `core.trans.manager.TransManager` instantiates them by the names listed in `[TRANSLATION] ENGINE`.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered engine classes keyed by name.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass under its distinguished name.

        Raises:
            TypeError: If the subclass does not provide fetch_engine_name().
            ValueError: If another engine is already registered under the same name.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return  # Engines with empty names are allowed but not registered.

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation engine with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls

    def __init__(self) -> None:
        self._engine_attributes: EngineAttributes | None = None

    @property
    def engine_attributes(self) -> EngineAttributes:
        """Get the engine attributes.

        Raises:
            RuntimeError: If initialize() has not set them yet.
        """
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once during initialization."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def engine_name(self) -> str:
        return self.engine_attributes.name

    def is_rate_limit_error(self, err: Exception) -> bool:
        """Check if the given exception indicates rate limiting.

        Args:
            err (Exception): Exception raised during translation.

        Returns:
            bool: True if the exception represents rate limiting.
        """
        return isinstance(err, TranslationRateLimitError)

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the translation engine is available.

        Returns:
            bool: True if the translation engine can serve requests.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the translation engine.

        Called during class registration in __init_subclass__, so the implementation must be available
        at subclass definition time.

        Returns:
            str: The distinguished name of the translation engine.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Initialize the translation engine with the given configuration.

        Args:
            config (Config): Configuration object containing settings for the translation engine.

        Raises:
            TranslationProviderError: If the engine cannot be used (for example, no API key).
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate input text to the target language.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None, the provider detects it.

        Returns:
            Result: Translation result with translated text.

        Raises:
            NotSupportedLanguagesError: If the specified language is not supported.
            TranslationQuotaExceededError: If the quota has been exceeded.
            TranslationRateLimitError: If the request is rate-limited by the API.
            TranslationTimeoutError: If the provider did not answer in time.
            TranslationProviderError: If translation fails for any other reason.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release network sessions and other resources held by the engine."""
        raise NotImplementedError

    def get_authentication_key(self) -> str:
        """Retrieve the API key from the environment.

        The variable is named after the engine with the suffix "_API_KEY"; for the engine "openai" it is
        "OPENAI_API_KEY".

        Returns:
            str: The key, or an empty string if the variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_KEY", "")
