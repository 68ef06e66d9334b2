from __future__ import annotations

import time
from typing import TYPE_CHECKING

from core.trans.engines import OpenAITranslation  # noqa: F401
from core.trans.interface import (
    Result,
    TransInterface,
    TranslationProviderError,
    TranslationRateLimitError,
)
from models.translation_models import TranslationInfo
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config
    from core.cache.manager import TranslationCacheManager
    from core.preference.store import PreferenceStore
    from models.preference_models import UserLanguage


__all__: list[str] = ["TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ADAPTIVE_LIMITER_ENABLED: bool = True
ADAPTIVE_LIMITER_BASE_COOLDOWN_SEC: float = 1.0
ADAPTIVE_LIMITER_MAX_COOLDOWN_SEC: float = 30.0
ADAPTIVE_LIMITER_RESET_SEC: float = 60.0
ADAPTIVE_LIMITER_LOG_INTERVAL_SEC: float = 5.0


class TransManager:
    """Manager for translation engines.

    Resolves the user's language preference, answers from the translation cache, and on a miss asks the
    active engine. The engine call is the cache's fetcher, so concurrent identical requests reach the engine once.

    After the engine reports rate limiting, further engine calls are refused for an exponentially growing
    cooldown. Cache hits are still served during the cooldown.
    """

    def __init__(
        self,
        config: Config,
        cache_manager: TranslationCacheManager,
        preference_store: PreferenceStore,
    ) -> None:
        """Initialize the TransManager with the given configuration.

        Args:
            config (Config): The configuration object containing translation engine settings.
            cache_manager (TranslationCacheManager): Cache that memoizes translations.
            preference_store (PreferenceStore): Source of each user's language preference.
        """
        self.config: Config = config
        self.cache_manager: TranslationCacheManager = cache_manager
        self.preference_store: PreferenceStore = preference_store
        self._trans_engine: list[str] = []
        self._trans_instance: dict[str, TransInterface] = {}
        self._rate_limit_error_count: int = 0
        self._rate_limit_last_error: float = 0.0
        self._rate_limit_until: float = 0.0
        self._rate_limit_last_log: float = 0.0
        logger.debug("Registered translation engines: %s", TransInterface.registered)

    async def initialize(self) -> None:
        """Initialize translation engines based on the configuration."""
        logger.info("TransManager initialization started")

        self._trans_engine.clear()
        for _name in self.config.TRANSLATION.ENGINE:
            _cls: type[TransInterface] | None = TransInterface.registered.get(_name)
            if _cls is None:
                logger.critical("Translation class not found: '%s'", _name)
                continue
            _instance: TransInterface = _cls()
            try:
                _instance.initialize(self.config)
            except TranslationProviderError as err:
                logger.critical("Exception in '%s' translation setup: %s", _name, err)
                continue
            self._trans_instance[_name] = _instance
            self._trans_engine.append(_name)
            logger.info("Translation engine initialized: '%s'", _name)
            logger.debug("Engine attributes: %s", _instance.engine_attributes)

    def add_engine(self, engine: TransInterface) -> None:
        """Register an already initialized engine instance, ahead of engines loaded from the configuration."""
        self._trans_instance[engine.engine_name] = engine
        if engine.engine_name in self._trans_engine:
            self._trans_engine.remove(engine.engine_name)
        self._trans_engine.insert(0, engine.engine_name)
        logger.info("Translation engine added: '%s'", engine.engine_name)

    def fetch_engine_names(self) -> list[str]:
        """Get the names of the usable engines, the active one first."""
        return self._trans_engine

    @property
    def current_engine_instance(self) -> TransInterface:
        """Get the currently active translation engine.

        Raises:
            TranslationProviderError: If no translation engine is available.
        """
        try:
            return self._trans_instance[self._trans_engine[0]]
        except IndexError as err:
            logger.debug("No available translation engines. Error: %s", err)
            msg = "No translation engines currently available"
            raise TranslationProviderError(msg) from err

    def refresh_active_engine_list(self) -> None:
        """Drop the active engine from the list if it has become unavailable."""
        if not self._trans_engine:
            logger.debug("No translation engines configured.")
            return
        if self.current_engine_instance.is_available:
            return

        remove_engine_name: str = self._trans_engine.pop(0)
        logger.error("Translation engine disabled: '%s'", remove_engine_name)

    def _rate_limit_blocked(self) -> bool:
        """Check if engine calls are currently blocked due to rate limiting."""
        if not ADAPTIVE_LIMITER_ENABLED:
            return False

        now: float = time.monotonic()
        if now < self._rate_limit_until:
            if now - self._rate_limit_last_log >= ADAPTIVE_LIMITER_LOG_INTERVAL_SEC:
                remaining: float = self._rate_limit_until - now
                logger.warning("Translation temporarily throttled (%.1f sec remaining).", remaining)
                self._rate_limit_last_log = now
            return True
        return False

    def _register_rate_limit(self) -> None:
        """Register a rate-limit event and extend the cooldown period accordingly."""
        if not ADAPTIVE_LIMITER_ENABLED:
            return

        now: float = time.monotonic()
        if now - self._rate_limit_last_error > ADAPTIVE_LIMITER_RESET_SEC:
            self._rate_limit_error_count = 0

        self._rate_limit_error_count += 1
        self._rate_limit_last_error = now

        backoff: float = ADAPTIVE_LIMITER_BASE_COOLDOWN_SEC * (2 ** (self._rate_limit_error_count - 1))
        backoff = min(backoff, ADAPTIVE_LIMITER_MAX_COOLDOWN_SEC)

        self._rate_limit_until = max(self._rate_limit_until, now + backoff)

    async def _fetch_translation(self, content: str, src_lang: str | None, tgt_lang: str) -> str:
        """Cache fetcher: ask the active engine for one translation.

        Raises:
            TranslationRateLimitError: If engine calls are in cooldown or the engine rate-limited the request.
            TranslationProviderError: If the engine failed or returned nothing.
        """
        if self._rate_limit_blocked():
            msg = "Translation temporarily throttled after rate limiting"
            raise TranslationRateLimitError(msg)

        engine: TransInterface = self.current_engine_instance
        logger.debug(
            "Using translation engine '%s'. Source: '%s', Target: '%s'", engine.engine_name, src_lang, tgt_lang
        )
        try:
            result: Result = await engine.translation(content=content, tgt_lang=tgt_lang, src_lang=src_lang)
        except TranslationProviderError as err:
            if engine.is_rate_limit_error(err):
                self._register_rate_limit()
                logger.warning("Translation rate limit detected: %s", err)
            self.refresh_active_engine_list()
            raise

        if not result.text:
            msg = f"Translation engine '{engine.engine_name}' returned no text"
            raise TranslationProviderError(msg)
        return result.text

    async def translate(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        """Translate content through the cache.

        Args:
            content (str): Text to translate, used verbatim as the cache key.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code, or None for auto-detection.

        Returns:
            str: Translated text; empty for empty content.

        Raises:
            TranslationProviderError: If the translation could not be obtained.
        """
        if not content:
            logger.debug("Empty content, skipping translation.")
            return ""

        translated: str = await self.cache_manager.translate_or_fetch(
            content, src_lang, tgt_lang, self._fetch_translation
        )
        logger.debug("Final translation result (src: '%s', tgt: '%s'): %s", src_lang, tgt_lang, translated[:50])
        return translated

    async def translate_for_user(self, user_id: int, content: str, chat_id: int | None = None) -> TranslationInfo:
        """Translate content into the language the user chose for the chat, or their fallback language.

        Raises:
            PreferenceNotFoundError: If the user has no usable preference.
            TranslationProviderError: If the translation could not be obtained.
        """
        preference: UserLanguage = await self.preference_store.get_preference(user_id, chat_id)
        trans_info = TranslationInfo(
            content=content,
            tgt_lang=preference.target_language,
            src_lang=preference.source_language,
            user_id=user_id,
            chat_id=chat_id,
        )
        logger.debug("Translation started. Parameters: %s", trans_info)
        trans_info.translated_text = await self.translate(trans_info.content, trans_info.tgt_lang, trans_info.src_lang)
        if self._trans_engine:
            trans_info.engine = self._trans_engine[0]
        return trans_info

    async def shutdown_engines(self) -> None:
        """Shut down all translation engines."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        for _inst in self._trans_instance.values():
            await _inst.close()
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)
