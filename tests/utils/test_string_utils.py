from __future__ import annotations

import pytest

from utils.string_utils import StringUtils


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("  keep  ", "  keep  "),
        (42, "42"),
    ],
)
def test_ensure_str(value: object, expected: str) -> None:
    assert StringUtils.ensure_str(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("value", "limit", "expected"),
    [
        ("hello world", 0, "hello world"),
        ("hello", 5, "hello"),
        ("hello world", 8, "hello..."),
        ("hello world", 2, "he"),
    ],
)
def test_truncate(value: str, limit: int, expected: str) -> None:
    assert StringUtils.truncate(value, limit) == expected


@pytest.mark.parametrize("code", ["en", "fil", "zh-CN", "pt-BR", "sr-Latn", "es-419", "EN"])
def test_is_language_code_accepts_tags(code: str) -> None:
    assert StringUtils.is_language_code(code) is True


@pytest.mark.parametrize("code", [None, "", "e", "english", "en_US", "12", "en-", " en", "fr\n"])
def test_is_language_code_rejects_malformed(code: str | None) -> None:
    assert StringUtils.is_language_code(code) is False


def test_hash_key_is_stable() -> None:
    first: str = StringUtils.generate_hash_key("hello", "en", "fr")
    second: str = StringUtils.generate_hash_key("hello", "en", "fr")

    assert first == second
    assert len(first) == 64


@pytest.mark.parametrize(
    "other",
    [
        ("hello", "null", "fr"),
        ("hello", "", "fr"),
        ("hello ", None, "fr"),
        ("Hello", None, "fr"),
        ("hello", None, "FR"),
    ],
)
def test_hash_key_distinguishes_every_component(other: tuple[str, str | None, str]) -> None:
    assert StringUtils.generate_hash_key("hello", None, "fr") != StringUtils.generate_hash_key(*other)
