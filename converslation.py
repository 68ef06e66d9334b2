"""Console runner for Converslation.

Reads lines from stdin and treats each one as a chat message from the given user in the given chat, printing the
bot's reply. Commands such as "/setlang fr" work as in a chat.

The OpenAI API key is read from the OPENAI_API_KEY environment variable.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import Config, ConfigLoader, ConfigLoaderError
from core.shared_data import SharedData
from core.version import VERSION
from handlers.command_handler import ChatCommandHandler
from models.message_models import ChatMessage
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

CFG_FILE: Final[str] = "converslation.ini"


def check_python_version() -> None:
    """Check if Python version is 3.13 or later.

    Raises:
        RuntimeError: If Python version is below 3.13.
    """
    if sys.version_info < (3, 13):
        msg = "Python 3.13 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Translate chat messages typed on the console",
        epilog="Example: python converslation.py --user 42 --chat 1001",
    )
    parser.add_argument("--config", dest="config", default=CFG_FILE, metavar="FILE", help="Configuration file")
    parser.add_argument("--user", dest="user", type=int, default=1, metavar="USER_ID", help="Sender user ID")
    parser.add_argument("--chat", dest="chat", type=int, default=None, metavar="CHAT_ID", help="Chat ID")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    config: Config = ConfigLoader(config_filename=args.config, script_name=script_name, debug=args.debug).config
    config.GENERAL.VERSION = VERSION
    return config


def setup_logging(config: Config) -> logging.Logger:
    log_utils = LoggerUtils(config.GENERAL.LOG_FILE)
    log_utils.set_level(config.GENERAL.LOG_LEVEL)
    return LoggerUtils.get_logger(__name__)


async def read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def main() -> None:
    check_python_version()
    args: argparse.Namespace = parse_arguments()
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return

    logger: logging.Logger = setup_logging(config)
    logger.info("%s ver.%s started", config.GENERAL.SCRIPT_NAME, config.GENERAL.VERSION)

    shared = SharedData(config)
    await shared.async_init()
    if not shared.trans_manager.fetch_engine_names():
        print("Warning: no translation engine is available; only cached translations can be served.", file=sys.stderr)

    handler = ChatCommandHandler(shared)
    print(f"Converslation ver.{VERSION} (user: {args.user}, chat: {args.chat}). Ctrl+D to quit.")
    try:
        while True:
            try:
                line: str = await read_line("> ")
            except EOFError:
                break
            reply: str | None = await handler.handle(ChatMessage(user_id=args.user, content=line, chat_id=args.chat))
            if reply is not None:
                print(reply)
    finally:
        await shared.async_teardown()
        logger.info("%s stopped", config.GENERAL.SCRIPT_NAME)


if __name__ == "__main__":
    with suppress(KeyboardInterrupt):
        asyncio.run(main())
