"""OpenAI chat completion API data models.

Only the fields the translator reads are declared; unknown response fields are ignored on decode.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, dataclass_json

__all__: list[str] = ["ChatCompletionRequest", "ChatCompletionResponse", "ChatMessageParam"]


@dataclass_json
@dataclass
class ChatMessageParam(DataClassJsonMixin):
    """One message of a chat completion conversation.

    Attributes:
        role (str): "system", "user" or "assistant".
        content (str | None): Message text. The API may return null content.
    """

    role: str
    content: str | None = None


@dataclass_json
@dataclass
class ChatCompletionRequest(DataClassJsonMixin):
    model: str
    messages: list[ChatMessageParam]
    temperature: float = 0.3
    max_tokens: int = 1000


@dataclass_json
@dataclass
class _Choice(DataClassJsonMixin):
    index: int = 0
    message: ChatMessageParam | None = None
    finish_reason: str | None = None


@dataclass_json
@dataclass
class _Usage(DataClassJsonMixin):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass_json
@dataclass
class ChatCompletionResponse(DataClassJsonMixin):
    """Chat completion response.

    Attributes:
        id (str): Completion identifier.
        model (str): Model that produced the completion.
        choices (list[_Choice]): Generated alternatives; the translator uses the first one.
        usage (_Usage | None): Token accounting.
    """

    id: str = ""
    model: str = ""
    choices: list[_Choice] = field(default_factory=list)
    usage: _Usage | None = None

    @property
    def first_content(self) -> str | None:
        """Stripped content of the first choice, or None when there is none."""
        if not self.choices:
            return None
        message: ChatMessageParam | None = self.choices[0].message
        if message is None or message.content is None:
            return None
        return message.content.strip()
