"""
Modguard Discord Bot
====================

A Discord bot that scores every guild message with a rule-based spam and
abuse classifier and automatically deletes, warns, times out, logs and
notifies when a message is flagged.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. MODGUARD_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise the repository root (two levels above this package).
    """
    if env_home := os.getenv("MODGUARD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.environ.setdefault("MODGUARD_HOME", str(BASE_DIR))
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from modguard.bot.cogs import automod_cmds, general_cmds, message_listener
from modguard.bot.discord_platform import DiscordChatPlatform
from modguard.configuration.app_configuration import app_config
from modguard.configuration.tenant_config_store import SqliteTenantConfigStore, TenantConfigStore
from modguard.database import init_database
from modguard.database.db_connection import db_connection
from modguard.database.moderation_log import ModerationLog
from modguard.moderation.enforcement_pipeline import EnforcementPipeline
from modguard.moderation.moderation_engine import ModerationEngine
from modguard.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load ``.env`` and return the Discord bot token.

    Raises
    ------
    SystemExit
        If ``DISCORD_BOT_TOKEN`` is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents needed to read message content and resolve members."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def build_engine(bot: discord.Client, config_store: TenantConfigStore) -> ModerationEngine:
    """Wire the moderation engine to the Discord platform adapter."""
    pipeline = EnforcementPipeline(DiscordChatPlatform(bot), app_config.moderation)
    return ModerationEngine(config_store, pipeline)


def load_cogs(bot: discord.Bot, engine: ModerationEngine, config_store: TenantConfigStore, moderation_log: ModerationLog) -> None:
    general_cmds.setup(bot)
    message_listener.setup(bot, engine, moderation_log)
    automod_cmds.setup(bot, config_store, moderation_log, app_config.moderation)
    logger.info("All cogs loaded successfully.")


def create_bot(config_store: TenantConfigStore, moderation_log: ModerationLog) -> tuple[discord.Bot, ModerationEngine]:
    """Instantiate the Discord bot, its moderation engine and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    engine = build_engine(bot, config_store)
    load_cogs(bot, engine, config_store, moderation_log)
    return bot, engine


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None, engine: ModerationEngine | None = None) -> None:
    """Cancel pending moderation work, close the bot and the database."""
    if engine is not None:
        try:
            await engine.shutdown()
        except Exception as exc:
            logger.exception("Error during moderation engine shutdown: %s", exc)

    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    await db_connection.close()
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database and the bot, returning an exit code."""
    token = load_environment()

    try:
        logger.info("Initializing database at %s...", app_config.database_path)
        await init_database(app_config.database_path)
    except Exception as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    config_store = SqliteTenantConfigStore()
    moderation_log = ModerationLog()

    try:
        bot, engine = create_bot(config_store, moderation_log)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await db_connection.close()
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, engine)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process code."""
    logger.info("Starting Modguard…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
