"""
The chat platform capability surface.

The enforcement pipeline only talks to a :class:`ChatPlatform`. The Discord
host provides :class:`modguard.bot.discord_platform.DiscordChatPlatform`;
tests substitute mocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from modguard.datatypes.discord_datatypes import GuildID
from modguard.datatypes.platform_refs import AuthorRef, ChannelRef, MessageRef
from modguard.moderation.embeds import EmbedPayload


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a single platform call."""

    succeeded: bool
    error_detail: Optional[str] = None
    message: Optional[MessageRef] = None

    @classmethod
    def ok(cls, message: MessageRef | None = None) -> "ActionResult":
        return cls(succeeded=True, message=message)

    @classmethod
    def failed(cls, detail: str) -> "ActionResult":
        return cls(succeeded=False, error_detail=detail)


class ChatPlatform:
    """Actions the moderation engine may request from a chat platform.

    Implementations report platform errors through the returned
    :class:`ActionResult` instead of raising.
    """

    async def delete_message(self, ref: MessageRef) -> ActionResult:
        raise NotImplementedError

    async def timeout_member(
        self,
        author: AuthorRef,
        guild_id: GuildID,
        duration: timedelta,
        reason: str,
    ) -> ActionResult:
        raise NotImplementedError

    async def send_channel_message(
        self,
        channel: ChannelRef,
        content: str | None = None,
        embed: EmbedPayload | None = None,
    ) -> ActionResult:
        """Post to a channel; on success ``result.message`` references the new message."""
        raise NotImplementedError

    async def send_direct_message(
        self,
        author: AuthorRef,
        content: str | None = None,
        embed: EmbedPayload | None = None,
    ) -> ActionResult:
        raise NotImplementedError

    def can_timeout_members(self, guild_id: GuildID) -> bool:
        """Whether the bot holds the moderate-members permission in the guild."""
        raise NotImplementedError
