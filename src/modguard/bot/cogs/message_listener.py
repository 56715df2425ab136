"""Message listener Cog for Modguard.

Forwards every guild message to the moderation engine and records what the
engine did in the moderation event log. Also answers the legacy ``!ping``.
"""

import aiosqlite
import discord
from discord.ext import commands

from modguard.bot.discord_platform import envelope_from_message
from modguard.database.moderation_log import ModerationLog
from modguard.moderation.moderation_engine import ModerationEngine
from modguard.util.logger import get_logger

logger = get_logger("message_listener_cog")

PING_COMMAND = "!ping"
PING_REPLY = "Pong! (Try using `/ping` for the new slash command version)"


def should_process_message(message: discord.Message) -> bool:
    """Only human messages posted inside a guild are moderated."""
    if message.guild is None:
        return False
    return not getattr(message.author, "bot", False)


class MessageListenerCog(commands.Cog):
    """
    Thin event listener in front of the moderation engine.

    Parameters
    ----------
    bot:
        Discord bot instance.
    engine:
        Runs the config gate, classification and enforcement.
    moderation_log:
        Receives a row for every flagged message.
    """

    def __init__(self, bot: discord.Bot, engine: ModerationEngine, moderation_log: ModerationLog) -> None:
        self.bot = bot
        self._engine = engine
        self._moderation_log = moderation_log
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> None:
        if not should_process_message(message):
            return

        envelope = envelope_from_message(message)
        report = await self._engine.handle_message(envelope)

        if report is not None and report.flagged:
            try:
                await self._moderation_log.record(envelope, report)
            except (aiosqlite.Error, RuntimeError) as exc:
                logger.error("[MESSAGE LISTENER] Failed to record moderation event: %s", exc)
            return

        if message.content == PING_COMMAND:
            await message.reply(PING_REPLY)


def setup(bot: discord.Bot, engine: ModerationEngine, moderation_log: ModerationLog) -> None:
    """Register the MessageListenerCog with the bot."""
    bot.add_cog(MessageListenerCog(bot, engine, moderation_log))
