from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Final

from core.trans.interface import (
    EngineAttributes,
    Result,
    TransInterface,
    TranslationProviderError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
    TranslationTimeoutError,
)
from handlers.async_comm import AsyncCommError, AsyncCommTimeoutError, AsyncHttp
from models.openai_models import ChatCompletionRequest, ChatCompletionResponse, ChatMessageParam
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config


__all__: list[str] = ["OpenAITranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_UNAUTHORIZED: Final[int] = 401
HTTP_PAYMENT_REQUIRED: Final[int] = 402
HTTP_FORBIDDEN: Final[int] = 403
HTTP_TOO_MANY_REQUESTS: Final[int] = 429


class OpenAITranslation(TransInterface):
    """Translation through the OpenAI chat completions API.

    The model is instructed to act as a translator and to return only the translation.
    """

    SYSTEM_PROMPT_WITH_SOURCE: ClassVar[str] = (
        "You are a professional translator. Translate the following text from {src} to {tgt}. "
        "Only return the translation, nothing else."
    )
    SYSTEM_PROMPT_AUTO: ClassVar[str] = (
        "You are a professional translator. Translate the following text to {tgt}. "
        "Only return the translation, nothing else."
    )

    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp | None = None
        self._api_key: str = ""
        self._api_url: str = ""
        self._model: str = ""
        self._temperature: float = 0.3
        self._max_tokens: int = 1000
        self._timeout: float = 30.0
        self._available: bool = False

    @property
    def is_available(self) -> bool:
        return self._available

    @staticmethod
    def fetch_engine_name() -> str:
        return "openai"

    def initialize(self, config: Config) -> None:
        """Read model settings and the API key.

        Raises:
            TranslationProviderError: If the API key is not set.
        """
        self.engine_attributes = EngineAttributes(name=self.fetch_engine_name(), supports_auto_detection=True)

        self._api_key = self.get_authentication_key()
        if not self._api_key:
            msg = f"{self.fetch_engine_name().upper()}_API_KEY is not configured"
            raise TranslationProviderError(msg)

        self._api_url = config.TRANSLATION.API_URL
        self._model = config.TRANSLATION.MODEL
        self._temperature = config.TRANSLATION.TEMPERATURE
        self._max_tokens = config.TRANSLATION.MAX_TOKENS
        self._timeout = config.TRANSLATION.TIMEOUT
        self._http = AsyncHttp()
        self._available = True
        logger.debug("OpenAI translation configured (model: '%s')", self._model)

    def build_request(self, content: str, tgt_lang: str, src_lang: str | None) -> ChatCompletionRequest:
        """Build the chat completion request for one translation."""
        if src_lang:
            system_prompt: str = self.SYSTEM_PROMPT_WITH_SOURCE.format(src=src_lang, tgt=tgt_lang)
        else:
            system_prompt = self.SYSTEM_PROMPT_AUTO.format(tgt=tgt_lang)

        return ChatCompletionRequest(
            model=self._model,
            messages=[
                ChatMessageParam(role="system", content=system_prompt),
                ChatMessageParam(role="user", content=content),
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        if self._http is None:
            msg = "OpenAI translation engine is not initialized"
            raise TranslationProviderError(msg)

        request: ChatCompletionRequest = self.build_request(content, tgt_lang, src_lang)
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

        try:
            raw = await self._http.post(
                url=self._api_url, data=request.to_dict(), headers=headers, total_timeout=self._timeout
            )
        except AsyncCommTimeoutError as err:
            msg = f"OpenAI API timeout: {err}"
            raise TranslationTimeoutError(msg) from err
        except AsyncCommError as err:
            raise self._classify_http_error(err) from err

        if not isinstance(raw, dict):
            msg = "Unexpected response format from OpenAI API"
            raise TranslationProviderError(msg)

        try:
            response: ChatCompletionResponse = ChatCompletionResponse.from_dict(raw)
        except (KeyError, TypeError, ValueError) as err:
            msg = f"Malformed response from OpenAI API: {err}"
            raise TranslationProviderError(msg) from err

        translated: str | None = response.first_content
        if not translated:
            msg = "No translation received from API"
            raise TranslationProviderError(msg)

        metadata: dict[str, str] = {"model": response.model or self._model}
        if response.usage is not None:
            metadata["total_tokens"] = str(response.usage.total_tokens)
        return Result(text=translated, detected_source_lang=src_lang, metadata=metadata)

    def _classify_http_error(self, err: AsyncCommError) -> TranslationProviderError:
        msg: str = f"OpenAI API error: {err.msg}"
        if err.status == HTTP_TOO_MANY_REQUESTS:
            return TranslationRateLimitError(msg)
        if err.status == HTTP_PAYMENT_REQUIRED:
            return TranslationQuotaExceededError(msg)
        if err.status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            # Credentials will not fix themselves; stop routing requests here.
            self._available = False
            logger.error("OpenAI API rejected the credentials (status: %s)", err.status)
        return TranslationProviderError(msg)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
            self._http = None
        self._available = False
