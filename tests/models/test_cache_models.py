from __future__ import annotations

import pytest

from models.cache_models import CacheKey
from utils.string_utils import StringUtils


def test_digest_is_computed_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str | None, str]] = []
    original = StringUtils.generate_hash_key

    def counting_hash(source_text: str, source_lang: str | None, target_lang: str) -> str:
        calls.append((source_text, source_lang, target_lang))
        return original(source_text, source_lang, target_lang)

    monkeypatch.setattr(StringUtils, "generate_hash_key", staticmethod(counting_hash))
    key = CacheKey("hello", None, "fr")

    first: str = key.digest
    second: str = key.digest

    assert first == second
    assert len(first) == 64
    assert calls == [("hello", None, "fr")]


def test_keys_compare_by_value() -> None:
    key = CacheKey("hello", None, "fr")
    _ = key.digest

    assert key == CacheKey("hello", None, "fr")
    assert hash(key) == hash(CacheKey("hello", None, "fr"))
    assert key != CacheKey("hello", "", "fr")
    assert key.language_pair == "auto>fr"
