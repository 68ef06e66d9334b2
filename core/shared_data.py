"""Shared data management for Converslation services.

This module defines the SharedData class, which serves as a centralized container for the services used by the
command handler and the runner: configuration, language preferences, the translation cache, in-flight fetch
management and translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.cache.inflight_manager import InFlightManager
from core.cache.manager import TranslationCacheManager
from core.preference.storage import create_preference_storage
from core.preference.store import PreferenceStore
from core.trans.manager import TransManager

if TYPE_CHECKING:
    from config.loader import Config


__all__: list[str] = ["SharedData"]


@dataclass
class SharedData:
    _config: Config = field()
    _preference_store: PreferenceStore = field(init=False)
    _inflight_manager: InFlightManager = field(init=False)
    _cache_manager: TranslationCacheManager = field(init=False)
    _trans_manager: TransManager = field(init=False)

    async def async_init(self) -> None:
        self._preference_store = PreferenceStore(create_preference_storage(self.config))
        self._inflight_manager = InFlightManager()
        self._cache_manager = TranslationCacheManager(self.config, self._inflight_manager)
        self._trans_manager = TransManager(self.config, self._cache_manager, self._preference_store)

        await self._preference_store.component_load()
        await self._cache_manager.component_load()
        await self._trans_manager.initialize()

    async def async_teardown(self) -> None:
        await self._trans_manager.shutdown_engines()
        await self._cache_manager.component_teardown()
        await self._preference_store.component_teardown()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def preference_store(self) -> PreferenceStore:
        return self._preference_store

    @property
    def cache_manager(self) -> TranslationCacheManager:
        return self._cache_manager

    @property
    def trans_manager(self) -> TransManager:
        return self._trans_manager

    @property
    def inflight_manager(self) -> InFlightManager:
        return self._inflight_manager
