"""Configuration data models for the Converslation service.

Each dataclass mirrors one section of the INI file. Field types drive the value conversion performed by
`config.loader.ConfigLoader`, so every field must carry a default of the intended type.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = [
    "CacheSettings",
    "Config",
    "General",
    "PreferenceSettings",
    "Translation",
]


@dataclass
class General:
    DEBUG: bool = False
    VERSION: str = ""
    SCRIPT_NAME: str = ""
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""


@dataclass
class CacheSettings:
    """Translation cache policy.

    Attributes:
        TTL_SECONDS (float): Maximum age of an entry before it is treated as a miss.
        MAX_ENTRIES (int): Number of live entries kept before LRU eviction.
        CLEANUP_INTERVAL (float): Seconds between periodic expiry sweeps. Zero or negative disables the sweep.
        FETCH_TIMEOUT (float): Seconds allowed for one provider call. Zero or negative waits indefinitely.
    """

    TTL_SECONDS: float = 3600.0
    MAX_ENTRIES: int = 1000
    CLEANUP_INTERVAL: float = 600.0
    FETCH_TIMEOUT: float = 30.0


@dataclass
class PreferenceSettings:
    # Empty path keeps preferences in memory only.
    DB_PATH: str = ""


@dataclass
class Translation:
    ENGINE: list[str] = field(default_factory=lambda: ["openai"])
    MODEL: str = "gpt-3.5-turbo"
    API_URL: str = "https://api.openai.com/v1/chat/completions"
    TEMPERATURE: float = 0.3
    MAX_TOKENS: int = 1000
    TIMEOUT: float = 30.0


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    CACHE: CacheSettings = field(default_factory=CacheSettings)
    PREFERENCE: PreferenceSettings = field(default_factory=PreferenceSettings)
    TRANSLATION: Translation = field(default_factory=Translation)
