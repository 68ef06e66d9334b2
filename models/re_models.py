"""Regular expressions for chat message parsing.

Patterns for language tags and bot commands.
"""

from __future__ import annotations

import re
from re import Pattern
from typing import Final

__all__: list[str] = [
    "COMMAND_PATTERN",
    "LANGUAGE_CODE_PATTERN",
]

# Language tag: primary subtag of 2-3 letters, optional script/region/variant subtags
# Examples: "en", "fil", "zh-CN", "pt-BR", "sr-Latn", "es-419"
LANGUAGE_CODE_PATTERN: Final[Pattern[str]] = re.compile(r"^[A-Za-z]{2,3}(?:-[A-Za-z0-9]{2,8})*$")

# Bot command with optional bot-name suffix and arguments
# Examples: "/setlang ja", "/mylang", "/setlang@converslation_bot fr en"
COMMAND_PATTERN: Final[Pattern[str]] = re.compile(
    r"^/(?P<command>[A-Za-z_]+)(?:@(?P<bot>\w+))?(?:\s+(?P<args>.*))?$", re.DOTALL
)
