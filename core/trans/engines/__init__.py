"""Translation engine implementations.

This package contains concrete implementations of the TransInterface for external translation providers.
Importing the package registers every engine with `TransInterface.registered`.

Modules:
- OpenAITranslation: Translation through the OpenAI chat completions API.
"""

from core.trans.engines.trans_openai import OpenAITranslation

__all__: list[str] = ["OpenAITranslation"]
