"""
Automod and language administration commands.

- ``/automod enable [log_channel]``, ``/automod disable``, ``/automod config``,
  ``/automod test <message>`` and ``/automod stats`` need the Manage Messages permission.
- ``/language set`` and ``/language show`` need the Manage Server permission.

All writes go through the tenant config store shared with the moderation
engine. Responses are ephemeral.
"""

import datetime

import aiosqlite
import discord
from discord.ext import commands

from modguard.configuration.moderation_config import Language, TenantModerationConfig
from modguard.configuration.moderation_settings import ModerationSettings
from modguard.configuration.tenant_config_store import TenantConfigStore
from modguard.database.moderation_log import ModerationEvent, ModerationLog
from modguard.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from modguard.detection.classifier import ClassificationResult, classify
from modguard.moderation.embeds import Severity, bullet_list, quote_content
from modguard.util.logger import get_logger

logger = get_logger("automod_commands")

GUILD_ONLY_MESSAGE = "This command can only be used in a server."
RECENT_EVENTS_SHOWN = 5


def _has_permission(ctx: discord.ApplicationContext, permission: str) -> bool:
    permissions = getattr(ctx.user, "guild_permissions", None)
    return bool(getattr(permissions, permission, False))


async def _check_context(ctx: discord.ApplicationContext, permission: str, label: str) -> bool:
    if not ctx.guild_id:
        await ctx.respond(GUILD_ONLY_MESSAGE, ephemeral=True)
        return False
    if not _has_permission(ctx, permission):
        await ctx.respond(f"You need {label} permission.", ephemeral=True)
        return False
    return True


def build_config_embed(config: TenantModerationConfig, settings: ModerationSettings) -> discord.Embed:
    status = "🟢 Enabled" if config.enabled else "🔴 Disabled"
    embed = discord.Embed(
        title="🛡️ AutoMod Configuration",
        color=discord.Color.green() if config.enabled else discord.Color.red(),
    )
    embed.add_field(name="Status", value=status, inline=True)
    embed.add_field(
        name="Log Channel",
        value=config.log_channel_id.mention if config.log_channel_id else "Not set",
        inline=True,
    )
    embed.add_field(name="Language", value=config.language.display_name, inline=True)
    embed.add_field(name="Spam Threshold", value=f"{round(settings.spam_threshold * 100)}%", inline=True)
    if config.enabled and config.enabled_at:
        embed.add_field(name="Enabled At", value=f"<t:{int(config.enabled_at.timestamp())}:f>", inline=True)
    if config.enabled and config.enabled_by:
        embed.add_field(name="Enabled By", value=config.enabled_by.mention, inline=True)
    return embed


def describe_event(event: ModerationEvent) -> str:
    reasons = ", ".join(event.reasons) or "no reasons"
    return f"{event.user_id.mention} in {event.channel_id.mention}: {reasons} ({round(event.score * 100)}%)"


def build_stats_embed(total: int, events: list[ModerationEvent]) -> discord.Embed:
    embed = discord.Embed(
        title="📊 AutoMod Statistics",
        color=discord.Color.blue(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="Flagged Messages", value=str(total), inline=True)
    embed.add_field(
        name="Recent Events",
        value="\n".join(f"• {describe_event(event)}" for event in events) or "No flagged messages yet.",
        inline=False,
    )
    return embed


def build_test_embed(message: str, result: ClassificationResult) -> discord.Embed:
    severity = Severity.for_score(result.score)
    verdict = "🚫 Would be removed" if result.is_spam else "✅ Allowed"
    embed = discord.Embed(
        title="🧪 AutoMod Test",
        color=discord.Color(severity.color) if result.is_spam else discord.Color.green(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="Message", value=quote_content(message, 500), inline=False)
    embed.add_field(name="Verdict", value=verdict, inline=True)
    embed.add_field(
        name="Confidence",
        value=f"{round(result.confidence * 100)}% ({severity.label.upper()})",
        inline=True,
    )
    embed.add_field(name="Reasons", value=bullet_list(result.reasons), inline=False)
    return embed


class AutomodCog(commands.Cog):
    """Enable, disable, inspect and dry-run automatic moderation."""

    automod = discord.SlashCommandGroup(
        "automod",
        "Configure automatic moderation for this server.",
        default_member_permissions=discord.Permissions(manage_messages=True),
    )

    def __init__(
        self,
        bot,
        config_store: TenantConfigStore,
        moderation_log: ModerationLog,
        settings: ModerationSettings | None = None,
    ):
        self.bot = bot
        self.config_store = config_store
        self.moderation_log = moderation_log
        self.settings = settings or ModerationSettings()
        logger.info("[AUTOMOD CMDS] Automod cog loaded")

    @automod.command(name="enable", description="Enable automatic moderation.")
    async def enable(
        self,
        ctx: discord.ApplicationContext,
        log_channel: discord.Option(
            discord.TextChannel,
            "Channel that receives moderation logs",
            required=False,
            default=None,
        ),
    ):
        if not await _check_context(ctx, "manage_messages", "Manage Messages"):
            return

        config = await self.config_store.set_enabled(
            GuildID(ctx.guild_id),
            True,
            by=UserID.from_object(ctx.user),
            log_channel_id=ChannelID.from_object(log_channel) if log_channel else None,
        )
        logger.info("[AUTOMOD CMDS] Automod enabled in guild %s by %s", config.guild_id, config.enabled_by)
        await ctx.respond("✅ Automatic moderation enabled.", embed=build_config_embed(config, self.settings), ephemeral=True)

    @automod.command(name="disable", description="Disable automatic moderation.")
    async def disable(self, ctx: discord.ApplicationContext):
        if not await _check_context(ctx, "manage_messages", "Manage Messages"):
            return

        config = await self.config_store.set_enabled(GuildID(ctx.guild_id), False)
        logger.info("[AUTOMOD CMDS] Automod disabled in guild %s", config.guild_id)
        await ctx.respond("⛔ Automatic moderation disabled.", ephemeral=True)

    @automod.command(name="config", description="Show the automatic moderation configuration.")
    async def show_config(self, ctx: discord.ApplicationContext):
        if not await _check_context(ctx, "manage_messages", "Manage Messages"):
            return

        config = await self.config_store.get_or_default(GuildID(ctx.guild_id))
        await ctx.respond(embed=build_config_embed(config, self.settings), ephemeral=True)

    @automod.command(name="test", description="Check how automatic moderation would judge a message.")
    async def test_message(
        self,
        ctx: discord.ApplicationContext,
        message: discord.Option(str, "Message to analyse"),
    ):
        if not await _check_context(ctx, "manage_messages", "Manage Messages"):
            return

        result = classify(message)
        logger.debug("[AUTOMOD CMDS] Dry run in guild %s: %s", ctx.guild_id, result.as_dict())
        await ctx.respond(embed=build_test_embed(message, result), ephemeral=True)

    @automod.command(name="stats", description="Show recent automatic moderation events.")
    async def show_stats(self, ctx: discord.ApplicationContext):
        if not await _check_context(ctx, "manage_messages", "Manage Messages"):
            return

        guild_id = GuildID(ctx.guild_id)
        try:
            total = await self.moderation_log.count_events(guild_id)
            events = await self.moderation_log.recent_events(guild_id, limit=RECENT_EVENTS_SHOWN)
        except (aiosqlite.Error, RuntimeError) as exc:
            logger.error("[AUTOMOD CMDS] Failed to read moderation events for guild %s: %s", guild_id, exc)
            await ctx.respond("❌ Could not load moderation statistics.", ephemeral=True)
            return
        await ctx.respond(embed=build_stats_embed(total, events), ephemeral=True)


class LanguageCog(commands.Cog):
    """Language of the warnings and DMs sent by automatic moderation."""

    language = discord.SlashCommandGroup(
        "language",
        "Language used for moderation messages.",
        default_member_permissions=discord.Permissions(manage_guild=True),
    )

    def __init__(self, bot, config_store: TenantConfigStore):
        self.bot = bot
        self.config_store = config_store

    @language.command(name="set", description="Set the moderation message language.")
    async def set_language(
        self,
        ctx: discord.ApplicationContext,
        language: discord.Option(
            str,
            "Language",
            choices=[
                discord.OptionChoice("English", Language.ENGLISH.value),
                discord.OptionChoice("Português", Language.PORTUGUESE.value),
            ],
        ),
    ):
        if not await _check_context(ctx, "manage_guild", "Manage Server"):
            return

        config = await self.config_store.set_language(GuildID(ctx.guild_id), language)
        if config.language is Language.PORTUGUESE:
            reply = f"✅ Idioma definido para {config.language.display_name}."
        else:
            reply = f"✅ Language set to {config.language.display_name}."
        await ctx.respond(reply, ephemeral=True)

    @language.command(name="show", description="Show the moderation message language.")
    async def show_language(self, ctx: discord.ApplicationContext):
        if not await _check_context(ctx, "manage_guild", "Manage Server"):
            return

        config = await self.config_store.get_or_default(GuildID(ctx.guild_id))
        await ctx.respond(f"🌐 Current language: {config.language.display_name}", ephemeral=True)


def setup(
    bot,
    config_store: TenantConfigStore,
    moderation_log: ModerationLog,
    settings: ModerationSettings | None = None,
):
    bot.add_cog(AutomodCog(bot, config_store, moderation_log, settings))
    bot.add_cog(LanguageCog(bot, config_store))
