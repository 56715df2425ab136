"""
py-cord implementation of the moderation capability surface.

Objects are resolved from the client cache first and fetched from the API on
a cache miss. ``discord`` exceptions never leave this module: they are turned
into failed :class:`ActionResult` values.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Awaitable, Callable, Optional

import discord

from modguard.bot.embed_renderer import render_embed
from modguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from modguard.datatypes.platform_refs import AuthorRef, ChannelRef, MessageEnvelope, MessageRef
from modguard.moderation.capability import ActionResult, ChatPlatform
from modguard.moderation.embeds import EmbedPayload
from modguard.util.logger import get_logger

logger = get_logger("discord_platform")


def envelope_from_message(message: discord.Message) -> MessageEnvelope:
    """Describe a guild message with platform-neutral references."""
    guild = message.guild
    channel = ChannelRef(
        guild_id=GuildID.from_object(guild),
        channel_id=ChannelID.from_object(message.channel),
        name=getattr(message.channel, "name", "") or "",
    )
    author = AuthorRef(
        user_id=UserID.from_object(message.author),
        display_name=str(message.author),
    )
    return MessageEnvelope(
        ref=MessageRef(channel=channel, message_id=MessageID.from_object(message)),
        author=author,
        content=message.content or "",
        guild_name=getattr(guild, "name", "") or "",
    )


class DiscordChatPlatform(ChatPlatform):
    """Executes moderation actions through a py-cord client."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Resolution helpers
    # ------------------------------------------------------------------

    async def _resolve_channel(self, channel_id: ChannelID) -> discord.abc.Messageable:
        channel = self.client.get_channel(channel_id.to_int())
        if channel is None:
            channel = await self.client.fetch_channel(channel_id.to_int())
        return channel

    async def _resolve_member(self, guild_id: GuildID, user_id: UserID) -> discord.Member:
        guild = self.client.get_guild(guild_id.to_int())
        if guild is None:
            guild = await self.client.fetch_guild(guild_id.to_int())
        member = guild.get_member(user_id.to_int())
        if member is None:
            member = await guild.fetch_member(user_id.to_int())
        return member

    async def _resolve_user(self, user_id: UserID) -> discord.User:
        user = self.client.get_user(user_id.to_int())
        if user is None:
            user = await self.client.fetch_user(user_id.to_int())
        return user

    async def _guarded(self, label: str, call: Callable[[], Awaitable[ActionResult]]) -> ActionResult:
        try:
            return await call()
        except discord.NotFound:
            return ActionResult.failed(f"{label}: not found")
        except discord.Forbidden:
            logger.warning("[DISCORD PLATFORM] %s: missing permissions", label)
            return ActionResult.failed(f"{label}: missing permissions")
        except discord.HTTPException as exc:
            logger.warning("[DISCORD PLATFORM] %s: HTTP %s %s", label, exc.status, exc.text)
            return ActionResult.failed(f"{label}: HTTP {exc.status}")

    # ------------------------------------------------------------------
    # ChatPlatform
    # ------------------------------------------------------------------

    async def delete_message(self, ref: MessageRef) -> ActionResult:
        async def call() -> ActionResult:
            channel = await self._resolve_channel(ref.channel.channel_id)
            await channel.get_partial_message(ref.message_id.to_int()).delete()
            return ActionResult.ok()

        return await self._guarded(f"delete message {ref.message_id}", call)

    async def timeout_member(
        self,
        author: AuthorRef,
        guild_id: GuildID,
        duration: timedelta,
        reason: str,
    ) -> ActionResult:
        async def call() -> ActionResult:
            member = await self._resolve_member(guild_id, author.user_id)
            await member.timeout_for(duration, reason=reason)
            return ActionResult.ok()

        return await self._guarded(f"timeout user {author.user_id}", call)

    async def send_channel_message(
        self,
        channel: ChannelRef,
        content: str | None = None,
        embed: EmbedPayload | None = None,
    ) -> ActionResult:
        async def call() -> ActionResult:
            target = await self._resolve_channel(channel.channel_id)
            sent = await target.send(content=content, embed=render_embed(embed) if embed else None)
            return ActionResult.ok(MessageRef(channel=channel, message_id=MessageID.from_object(sent)))

        return await self._guarded(f"send to channel {channel.channel_id}", call)

    async def send_direct_message(
        self,
        author: AuthorRef,
        content: str | None = None,
        embed: EmbedPayload | None = None,
    ) -> ActionResult:
        async def call() -> ActionResult:
            user = await self._resolve_user(author.user_id)
            await user.send(content=content, embed=render_embed(embed) if embed else None)
            return ActionResult.ok()

        return await self._guarded(f"DM user {author.user_id}", call)

    def can_timeout_members(self, guild_id: GuildID) -> bool:
        guild: Optional[discord.Guild] = self.client.get_guild(guild_id.to_int())
        me = getattr(guild, "me", None)
        if me is None:
            return False
        return bool(me.guild_permissions.moderate_members)
