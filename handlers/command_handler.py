"""Chat command handling for Converslation.

Turns chat messages into replies: bot commands manage the sender's language preference and plain text is
translated into the sender's chosen language. The handler is transport-agnostic; a transport passes in a
`ChatMessage` and sends back the returned text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from core.preference.store import InvalidLanguageCodeError, PreferenceNotFoundError
from core.trans.interface import TranslationProviderError
from models.language_models import POPULAR_LANGUAGES, display_name
from models.re_models import COMMAND_PATTERN
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable

    from core.shared_data import SharedData
    from models.cache_models import CacheStatistics
    from models.message_models import ChatMessage
    from models.preference_models import UserLanguage
    from models.translation_models import TranslationInfo


__all__: list[str] = ["ChatCommandHandler"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

NO_LANGUAGE_MESSAGE: str = "❌ No language set for this chat. Use /setlang to set one."
TRANSLATION_FAILED_MESSAGE: str = "❌ Translation failed. Please try again later or check your API configuration."
SETLANG_USAGE_MESSAGE: str = "Usage: /setlang <target language> [source language]. Example: /setlang fr en"


class ChatCommandHandler:
    """Dispatches chat messages to command handlers or to translation.

    Args:
        shared (SharedData): Initialized container of the preference store, cache and translation manager.
        bot_name (str): Commands suffixed with another bot's name ("/help@other_bot") are ignored.
    """

    commands: ClassVar[dict[str, str]] = {
        "start": "Start the bot and see welcome message",
        "help": "Show help and usage instructions",
        "setlang": "Set target translation language",
        "mylang": "Show current language setting",
        "clearlang": "Clear language setting for this chat",
        "cachestats": "Show translation cache statistics",
    }

    def __init__(self, shared: SharedData, bot_name: str = "") -> None:
        self.shared: SharedData = shared
        self.bot_name: str = bot_name
        self._handlers: dict[str, Callable[[ChatMessage, list[str]], Awaitable[str]]] = {
            "start": self.start,
            "help": self.help,
            "setlang": self.setlang,
            "mylang": self.mylang,
            "clearlang": self.clearlang,
            "cachestats": self.cachestats,
        }

    async def handle(self, message: ChatMessage) -> str | None:
        """Produce the reply for one chat message.

        Args:
            message (ChatMessage): The received message.

        Returns:
            str | None: Reply text, or None if the message is not meant for this bot.
        """
        if not message.is_command:
            return await self.translate(message)

        match = COMMAND_PATTERN.match(message.content.strip())
        if match is None:
            return await self.translate(message)

        bot: str | None = match.group("bot")
        if bot and self.bot_name and bot.lower() != self.bot_name.lower():
            logger.debug("Ignoring command addressed to '%s'", bot)
            return None

        command: str = match.group("command").lower()
        args: list[str] = (match.group("args") or "").split()
        handler = self._handlers.get(command)
        if handler is None:
            logger.debug("Unknown command '%s' from user %s", command, message.user_id)
            return f"Unknown command '/{command}'. Use /help to see the available commands."

        logger.debug("Command '%s' invoked by user: %s", command, message.display_name or message.user_id)
        return await handler(message, args)

    async def start(self, message: ChatMessage, args: list[str]) -> str:
        _ = message, args
        return "\n".join(
            [
                "👋 Welcome to Converslation Bot!",
                "",
                "🌐 I help you communicate in any language with your friends!",
                "",
                "📱 How to use:",
                "1. Set your friend's language using /setlang",
                "2. Send me your message",
                "3. I'll translate it for you!",
                "",
                "💡 Use /help for more information",
            ]
        )

    async def help(self, message: ChatMessage, args: list[str]) -> str:
        _ = message, args
        lines: list[str] = ["📖 Converslation Bot Help", "", "Commands:"]
        lines.extend(f"/{name} - {description}" for name, description in self.commands.items())
        lines.extend(
            [
                "",
                "/setlang <target> [source] sets the languages directly, e.g. /setlang fr or /setlang fr en.",
                "",
                "Any other message is translated to the language you set for this chat.",
                "",
                "💡 Tip: Set different languages for different chats!",
            ]
        )
        return "\n".join(lines)

    async def setlang(self, message: ChatMessage, args: list[str]) -> str:
        """Show the language choices, or store "/setlang <target> [source]" for this chat."""
        if not args:
            lines: list[str] = ["🌐 Select the language you want to translate to in this chat:"]
            lines.extend(f"/setlang {lang.code} - {lang}" for lang in POPULAR_LANGUAGES)
            return "\n".join(lines)

        if len(args) > 2:  # noqa: PLR2004
            return SETLANG_USAGE_MESSAGE

        target: str = args[0]
        source: str | None = args[1] if len(args) > 1 else None
        try:
            record: UserLanguage = await self.shared.preference_store.set_preference(
                message.user_id, message.chat_id, target, source
            )
        except InvalidLanguageCodeError as err:
            logger.info("Rejected language setting from user %s: %s", message.user_id, err)
            return f"❌ Invalid language code. {SETLANG_USAGE_MESSAGE}"

        reply: str = f"✅ Translation language set to {display_name(record.target_language)} for this chat!"
        if record.source_language is not None:
            reply += f"\nMessages are read as {display_name(record.source_language)}."
        return reply

    async def mylang(self, message: ChatMessage, args: list[str]) -> str:
        _ = args
        try:
            record: UserLanguage = await self.shared.preference_store.get_preference(message.user_id, message.chat_id)
        except PreferenceNotFoundError:
            return NO_LANGUAGE_MESSAGE

        reply: str = f"🌐 Current translation language for this chat: {display_name(record.target_language)}"
        if record.source_language is not None:
            reply += f" (from {display_name(record.source_language)})"
        if record.chat_id is None and message.chat_id is not None:
            reply += "\nThis is your default setting for all chats."
        return reply

    async def clearlang(self, message: ChatMessage, args: list[str]) -> str:
        _ = args
        removed: bool = await self.shared.preference_store.clear_preference(message.user_id, message.chat_id)
        if removed:
            return "✅ Language setting cleared for this chat."
        return "ℹ️ No language setting to clear for this chat."  # noqa: RUF001

    async def cachestats(self, message: ChatMessage, args: list[str]) -> str:
        _ = message, args
        stats: CacheStatistics = await self.shared.cache_manager.get_cache_statistics()
        lines: list[str] = [
            "📊 Translation cache",
            f"Entries: {stats.total_entries}",
            f"Hits: {stats.total_hits} / Misses: {stats.total_misses} (hit rate {stats.hit_rate:.0%})",
            f"Translator calls: {stats.fetch_count} (failed: {stats.fetch_failures})",
            f"Evicted: {stats.evicted_lru} / Expired: {stats.expired}",
        ]
        if stats.language_pair_distribution:
            pairs: str = ", ".join(
                f"{pair}: {count}" for pair, count in sorted(stats.language_pair_distribution.items())
            )
            lines.append(f"Language pairs: {pairs}")
        return "\n".join(lines)

    async def translate(self, message: ChatMessage) -> str:
        """Translate a plain-text message with the sender's preference for the chat."""
        try:
            preference: UserLanguage = await self.shared.preference_store.get_preference(
                message.user_id, message.chat_id
            )
        except PreferenceNotFoundError:
            return NO_LANGUAGE_MESSAGE

        if not message.content.strip():
            target: str = display_name(preference.target_language)
            return f"💬 Type your message to translate it. Will translate to {target}"

        try:
            trans_info: TranslationInfo = await self.shared.trans_manager.translate_for_user(
                message.user_id, message.content, message.chat_id
            )
        except PreferenceNotFoundError:
            return NO_LANGUAGE_MESSAGE
        except TranslationProviderError as err:
            logger.error("Translation failed for user %s: %s", message.user_id, err)
            return TRANSLATION_FAILED_MESSAGE

        logger.debug(
            "Translated for user %s (%s): '%s'",
            message.user_id,
            trans_info.tgt_lang,
            StringUtils.truncate(trans_info.translated_text, 50),
        )
        return trans_info.translated_text
