"""
Tests for the slash command cogs and the message listener.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiosqlite
import pytest

from modguard.bot.cogs import automod_cmds, general_cmds, message_listener
from modguard.configuration.moderation_config import Language, TenantModerationConfig
from modguard.configuration.moderation_settings import ModerationSettings
from modguard.configuration.tenant_config_store import InMemoryTenantConfigStore
from modguard.database.moderation_log import ModerationEvent
from modguard.datatypes.discord_datatypes import ChannelID, MessageID, UserID
from modguard.detection.classifier import ClassificationResult
from modguard.moderation.enforcement_datatypes import EnforcementReport, ModerationState
from moderation_fixtures import GUILD, field_named


class Ctx:
    def __init__(self, guild_id=GUILD.to_int(), manage_messages=True, manage_guild=True):
        self.guild_id = guild_id
        self.user = SimpleNamespace(
            id=42,
            guild_permissions=SimpleNamespace(manage_messages=manage_messages, manage_guild=manage_guild),
        )
        self.respond = AsyncMock()


def test_setup_adds_cogs():
    added = []
    fake_bot = SimpleNamespace(add_cog=added.append)

    automod_cmds.setup(fake_bot, InMemoryTenantConfigStore(), MagicMock())
    general_cmds.setup(fake_bot)
    message_listener.setup(fake_bot, MagicMock(), MagicMock())

    assert [type(cog) for cog in added] == [
        automod_cmds.AutomodCog,
        automod_cmds.LanguageCog,
        general_cmds.GeneralCog,
        message_listener.MessageListenerCog,
    ]


class TestAutomodCommands:
    @pytest.mark.asyncio
    async def test_enable_stores_log_channel_and_admin(self):
        store = InMemoryTenantConfigStore()
        cog = automod_cmds.AutomodCog(SimpleNamespace(), store, MagicMock())
        ctx = Ctx()

        await automod_cmds.AutomodCog.enable.callback(cog, ctx, SimpleNamespace(id=3000))

        config = await store.get(GUILD)
        assert config.enabled is True
        assert config.log_channel_id == 3000
        assert config.enabled_by == 42
        args, kwargs = ctx.respond.await_args
        assert args[0] == "✅ Automatic moderation enabled."
        assert kwargs["ephemeral"] is True
        assert kwargs["embed"].fields[0].value == "🟢 Enabled"

    @pytest.mark.asyncio
    async def test_disable(self):
        store = InMemoryTenantConfigStore(TenantModerationConfig(guild_id=GUILD, enabled=True))
        cog = automod_cmds.AutomodCog(SimpleNamespace(), store, MagicMock())
        ctx = Ctx()

        await automod_cmds.AutomodCog.disable.callback(cog, ctx)

        assert (await store.get(GUILD)).enabled is False
        ctx.respond.assert_awaited_once_with("⛔ Automatic moderation disabled.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_requires_guild_context(self):
        store = InMemoryTenantConfigStore()
        cog = automod_cmds.AutomodCog(SimpleNamespace(), store, MagicMock())
        ctx = Ctx(guild_id=None)

        await automod_cmds.AutomodCog.disable.callback(cog, ctx)

        ctx.respond.assert_awaited_once_with("This command can only be used in a server.", ephemeral=True)
        assert await store.get(GUILD) is None

    @pytest.mark.asyncio
    async def test_requires_manage_messages(self):
        store = InMemoryTenantConfigStore()
        cog = automod_cmds.AutomodCog(SimpleNamespace(), store, MagicMock())
        ctx = Ctx(manage_messages=False)

        await automod_cmds.AutomodCog.enable.callback(cog, ctx, None)

        ctx.respond.assert_awaited_once_with("You need Manage Messages permission.", ephemeral=True)
        assert await store.get(GUILD) is None

    @pytest.mark.asyncio
    async def test_config_for_unconfigured_guild(self):
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), MagicMock())
        ctx = Ctx()

        await automod_cmds.AutomodCog.show_config.callback(cog, ctx)

        embed = ctx.respond.await_args.kwargs["embed"]
        assert embed.fields[0].value == "🔴 Disabled"
        assert embed.fields[1].value == "Not set"
        assert embed.fields[2].value == "English"

    @pytest.mark.asyncio
    async def test_dry_run_does_not_touch_config(self):
        store = InMemoryTenantConfigStore()
        cog = automod_cmds.AutomodCog(SimpleNamespace(), store, MagicMock())
        ctx = Ctx()

        await automod_cmds.AutomodCog.test_message.callback(cog, ctx, "free discord nitro")

        embed = ctx.respond.await_args.kwargs["embed"]
        assert embed.fields[1].value == "🚫 Would be removed"
        assert "Fake Discord Nitro/Boost offer detected" in embed.fields[3].value
        assert await store.get(GUILD) is None

    @pytest.mark.asyncio
    async def test_dry_run_neutralises_code_fences(self):
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), MagicMock())
        ctx = Ctx()

        await automod_cmds.AutomodCog.test_message.callback(cog, ctx, "```hello```")

        embed = ctx.respond.await_args.kwargs["embed"]
        assert field_named(embed, "Message").value == "```'''hello'''```"

    @pytest.mark.asyncio
    async def test_config_shows_spam_threshold(self):
        settings = ModerationSettings({"spam_threshold": 0.75})
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), MagicMock(), settings)
        ctx = Ctx()

        await automod_cmds.AutomodCog.show_config.callback(cog, ctx)

        embed = ctx.respond.await_args.kwargs["embed"]
        assert field_named(embed, "Spam Threshold").value == "75%"

    @pytest.mark.asyncio
    async def test_stats_lists_recent_events(self):
        moderation_log = MagicMock()
        moderation_log.count_events = AsyncMock(return_value=12)
        moderation_log.recent_events = AsyncMock(
            return_value=[
                ModerationEvent(
                    event_id=12,
                    guild_id=GUILD,
                    channel_id=ChannelID(2000),
                    user_id=UserID(4000),
                    message_id=MessageID(5000),
                    score=0.7,
                    reasons=["Excessive caps lock usage", "Profanity detected (English)"],
                    outcomes=[],
                    timestamp="2024-05-01T12:00:00+00:00",
                )
            ]
        )
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), moderation_log)
        ctx = Ctx()

        await automod_cmds.AutomodCog.show_stats.callback(cog, ctx)

        moderation_log.recent_events.assert_awaited_once_with(GUILD, limit=automod_cmds.RECENT_EVENTS_SHOWN)
        embed = ctx.respond.await_args.kwargs["embed"]
        assert field_named(embed, "Flagged Messages").value == "12"
        assert field_named(embed, "Recent Events").value == (
            "• <@4000> in <#2000>: Excessive caps lock usage, Profanity detected (English) (70%)"
        )

    @pytest.mark.asyncio
    async def test_stats_without_events(self):
        moderation_log = MagicMock()
        moderation_log.count_events = AsyncMock(return_value=0)
        moderation_log.recent_events = AsyncMock(return_value=[])
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), moderation_log)
        ctx = Ctx()

        await automod_cmds.AutomodCog.show_stats.callback(cog, ctx)

        embed = ctx.respond.await_args.kwargs["embed"]
        assert field_named(embed, "Recent Events").value == "No flagged messages yet."

    @pytest.mark.asyncio
    async def test_stats_database_error_replies_with_error(self):
        moderation_log = MagicMock()
        moderation_log.count_events = AsyncMock(side_effect=aiosqlite.OperationalError("database is locked"))
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), moderation_log)
        ctx = Ctx()

        await automod_cmds.AutomodCog.show_stats.callback(cog, ctx)

        ctx.respond.assert_awaited_once_with("❌ Could not load moderation statistics.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_stats_needs_manage_messages(self):
        moderation_log = MagicMock()
        moderation_log.count_events = AsyncMock()
        cog = automod_cmds.AutomodCog(SimpleNamespace(), InMemoryTenantConfigStore(), moderation_log)
        ctx = Ctx(manage_messages=False)

        await automod_cmds.AutomodCog.show_stats.callback(cog, ctx)

        moderation_log.count_events.assert_not_awaited()
        ctx.respond.assert_awaited_once_with("You need Manage Messages permission.", ephemeral=True)


class TestLanguageCommands:
    @pytest.mark.asyncio
    async def test_set_portuguese_replies_in_portuguese(self):
        store = InMemoryTenantConfigStore()
        cog = automod_cmds.LanguageCog(SimpleNamespace(), store)
        ctx = Ctx()

        await automod_cmds.LanguageCog.set_language.callback(cog, ctx, "pt")

        assert (await store.get(GUILD)).language is Language.PORTUGUESE
        ctx.respond.assert_awaited_once_with("✅ Idioma definido para Português.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_requires_manage_guild(self):
        cog = automod_cmds.LanguageCog(SimpleNamespace(), InMemoryTenantConfigStore())
        ctx = Ctx(manage_guild=False)

        await automod_cmds.LanguageCog.set_language.callback(cog, ctx, "pt")

        ctx.respond.assert_awaited_once_with("You need Manage Server permission.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_show(self):
        store = InMemoryTenantConfigStore(TenantModerationConfig(guild_id=GUILD, language=Language.PORTUGUESE))
        cog = automod_cmds.LanguageCog(SimpleNamespace(), store)
        ctx = Ctx()

        await automod_cmds.LanguageCog.show_language.callback(cog, ctx)

        ctx.respond.assert_awaited_once_with("🌐 Current language: Português", ephemeral=True)


@pytest.mark.asyncio
async def test_ping_reports_latency():
    cog = general_cmds.GeneralCog(SimpleNamespace(latency=0.1234))
    ctx = Ctx()

    await general_cmds.GeneralCog.ping.callback(cog, ctx)

    ctx.respond.assert_awaited_once_with("🏓 Pong! Latency: 123 ms", ephemeral=True)


def make_message(content, bot=False, guild=True):
    message = MagicMock()
    message.id = 5
    message.content = content
    message.author.id = 3
    message.author.bot = bot
    message.guild = MagicMock(id=GUILD.to_int()) if guild else None
    message.channel.id = 2
    message.reply = AsyncMock()
    return message


def flagged_report():
    return EnforcementReport(
        state=ModerationState.ENFORCED,
        classification=ClassificationResult(score=0.9, is_spam=True, reasons=("Mass mentions detected",)),
    )


class TestMessageListener:
    @pytest.mark.asyncio
    async def test_ignores_bots_and_direct_messages(self):
        engine = MagicMock()
        engine.handle_message = AsyncMock()
        cog = message_listener.MessageListenerCog(SimpleNamespace(), engine, MagicMock())

        await cog.on_message(make_message("hi", bot=True))
        await cog.on_message(make_message("hi", guild=False))

        engine.handle_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flagged_message_is_recorded(self):
        engine = MagicMock()
        engine.handle_message = AsyncMock(return_value=flagged_report())
        moderation_log = MagicMock()
        moderation_log.record = AsyncMock(return_value=1)
        cog = message_listener.MessageListenerCog(SimpleNamespace(), engine, moderation_log)
        message = make_message("!ping")

        await cog.on_message(message)

        moderation_log.record.assert_awaited_once()
        envelope, report = moderation_log.record.await_args.args
        assert envelope.ref.message_id == 5
        assert report.flagged is True
        message.reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_log_failure_is_swallowed(self):
        engine = MagicMock()
        engine.handle_message = AsyncMock(return_value=flagged_report())
        moderation_log = MagicMock()
        moderation_log.record = AsyncMock(side_effect=aiosqlite.OperationalError("disk I/O error"))
        cog = message_listener.MessageListenerCog(SimpleNamespace(), engine, moderation_log)

        await cog.on_message(make_message("spam"))

        moderation_log.record.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_legacy_ping(self):
        engine = MagicMock()
        engine.handle_message = AsyncMock(return_value=None)
        cog = message_listener.MessageListenerCog(SimpleNamespace(), engine, MagicMock())
        message = make_message("!ping")

        await cog.on_message(message)

        message.reply.assert_awaited_once_with(message_listener.PING_REPLY)
