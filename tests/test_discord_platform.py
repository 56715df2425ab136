from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from modguard.bot.discord_platform import DiscordChatPlatform, envelope_from_message
from modguard.bot.embed_renderer import render_embed
from modguard.datatypes.discord_datatypes import GuildID
from modguard.moderation.embeds import EmbedField, EmbedPayload
from moderation_fixtures import CHANNEL, GUILD, USER, make_envelope


def http_error(cls, status, reason):
    response = MagicMock()
    response.status = status
    response.reason = reason
    return cls(response, reason)


def make_client():
    client = MagicMock()
    channel = MagicMock()
    partial = MagicMock()
    partial.delete = AsyncMock()
    channel.get_partial_message.return_value = partial
    sent = MagicMock()
    sent.id = 777
    channel.send = AsyncMock(return_value=sent)
    client.get_channel.return_value = channel
    client.fetch_channel = AsyncMock(return_value=channel)
    return client, channel, partial


def test_envelope_from_message():
    message = MagicMock()
    message.id = 5
    message.content = "hello"
    message.guild.id = 1
    message.guild.name = "Guild"
    message.channel.id = 2
    message.channel.name = "general"
    message.author.id = 3
    message.author.__str__.return_value = "someone#1234"

    envelope = envelope_from_message(message)

    assert envelope.guild_id == GuildID(1)
    assert envelope.channel.channel_id == 2
    assert envelope.author.user_id == 3
    assert envelope.author.display_name == "someone#1234"
    assert envelope.ref.message_id == 5
    assert envelope.content == "hello"
    assert envelope.guild_name == "Guild"


class TestDeleteMessage:
    @pytest.mark.asyncio
    async def test_deletes_partial_message(self):
        client, channel, partial = make_client()
        platform = DiscordChatPlatform(client)

        result = await platform.delete_message(make_envelope("x").ref)

        assert result.succeeded is True
        client.get_channel.assert_called_once_with(CHANNEL.to_int())
        channel.get_partial_message.assert_called_once_with(5000)
        partial.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetches_channel_on_cache_miss(self):
        client, channel, partial = make_client()
        client.get_channel.return_value = None
        platform = DiscordChatPlatform(client)

        result = await platform.delete_message(make_envelope("x").ref)

        assert result.succeeded is True
        client.fetch_channel.assert_awaited_once_with(CHANNEL.to_int())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, detail",
        [
            (http_error(discord.NotFound, 404, "Not Found"), "not found"),
            (http_error(discord.Forbidden, 403, "Forbidden"), "missing permissions"),
            (http_error(discord.HTTPException, 500, "Server Error"), "HTTP 500"),
        ],
    )
    async def test_discord_errors_become_failed_results(self, error, detail):
        client, _, partial = make_client()
        partial.delete.side_effect = error
        platform = DiscordChatPlatform(client)

        result = await platform.delete_message(make_envelope("x").ref)

        assert result.succeeded is False
        assert result.error_detail.endswith(detail)


class TestTimeoutMember:
    @pytest.mark.asyncio
    async def test_times_out_member(self):
        client = MagicMock()
        member = MagicMock()
        member.timeout_for = AsyncMock()
        client.get_guild.return_value.get_member.return_value = member
        platform = DiscordChatPlatform(client)

        envelope = make_envelope("x")
        result = await platform.timeout_member(envelope.author, GUILD, timedelta(minutes=5), "spam")

        assert result.succeeded is True
        client.get_guild.return_value.get_member.assert_called_once_with(USER.to_int())
        member.timeout_for.assert_awaited_once_with(timedelta(minutes=5), reason="spam")

    @pytest.mark.asyncio
    async def test_forbidden(self):
        client = MagicMock()
        member = MagicMock()
        member.timeout_for = AsyncMock(side_effect=http_error(discord.Forbidden, 403, "Forbidden"))
        client.get_guild.return_value.get_member.return_value = member
        platform = DiscordChatPlatform(client)

        result = await platform.timeout_member(make_envelope("x").author, GUILD, timedelta(minutes=5), "spam")

        assert result.succeeded is False
        assert "missing permissions" in result.error_detail


class TestSending:
    @pytest.mark.asyncio
    async def test_channel_message_returns_sent_ref(self):
        client, channel, _ = make_client()
        platform = DiscordChatPlatform(client)
        target = make_envelope("x").channel

        result = await platform.send_channel_message(target, content="careful")

        assert result.succeeded is True
        assert result.message.message_id == 777
        assert result.message.channel == target
        channel.send.assert_awaited_once_with(content="careful", embed=None)

    @pytest.mark.asyncio
    async def test_direct_message_renders_embed(self):
        client = MagicMock()
        user = MagicMock()
        user.send = AsyncMock()
        client.get_user.return_value = user
        platform = DiscordChatPlatform(client)

        result = await platform.send_direct_message(make_envelope("x").author, embed=EmbedPayload(title="Hi"))

        assert result.succeeded is True
        sent_embed = user.send.await_args.kwargs["embed"]
        assert isinstance(sent_embed, discord.Embed)
        assert sent_embed.title == "Hi"

    @pytest.mark.asyncio
    async def test_closed_dms(self):
        client = MagicMock()
        client.get_user.return_value = None
        user = MagicMock()
        user.send = AsyncMock(side_effect=http_error(discord.Forbidden, 403, "Cannot send messages to this user"))
        client.fetch_user = AsyncMock(return_value=user)
        platform = DiscordChatPlatform(client)

        result = await platform.send_direct_message(make_envelope("x").author, content="hi")

        assert result.succeeded is False
        client.fetch_user.assert_awaited_once_with(USER.to_int())


class TestCanTimeout:
    def test_uses_bot_permissions(self):
        client = MagicMock()
        client.get_guild.return_value.me.guild_permissions.moderate_members = True
        assert DiscordChatPlatform(client).can_timeout_members(GUILD) is True

        client.get_guild.return_value.me.guild_permissions.moderate_members = False
        assert DiscordChatPlatform(client).can_timeout_members(GUILD) is False

    def test_unknown_guild(self):
        client = MagicMock()
        client.get_guild.return_value = None
        assert DiscordChatPlatform(client).can_timeout_members(GUILD) is False


def test_render_embed():
    payload = EmbedPayload(
        title="Title",
        description="Body",
        color=0x9C27B0,
        fields=(EmbedField("A", "1", inline=True),),
        footer="footer",
    )

    embed = render_embed(payload)

    assert embed.title == "Title"
    assert embed.description == "Body"
    assert embed.color.value == 0x9C27B0
    assert embed.fields[0].name == "A" and embed.fields[0].inline is True
    assert embed.footer.text == "footer"
