"""
Platform-neutral references to the things moderation acts upon.

The engine never touches ``discord`` objects directly; the host converts an
incoming message into these small frozen records and the chat platform adapter
resolves them back into live objects when an action is requested.
"""

from __future__ import annotations

from dataclasses import dataclass

from modguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID


@dataclass(frozen=True, slots=True)
class AuthorRef:
    """Identity of a message author."""

    user_id: UserID
    display_name: str = ""

    @property
    def mention(self) -> str:
        return self.user_id.mention

    def describe(self) -> str:
        """Human readable ``<mention> (name)`` label used in audit embeds."""
        if self.display_name:
            return f"{self.mention} ({self.display_name})"
        return self.mention


@dataclass(frozen=True, slots=True)
class ChannelRef:
    """A text channel inside a guild."""

    guild_id: GuildID
    channel_id: ChannelID
    name: str = ""

    @property
    def mention(self) -> str:
        return self.channel_id.mention


@dataclass(frozen=True, slots=True)
class MessageRef:
    """A message posted in a channel."""

    channel: ChannelRef
    message_id: MessageID

    @property
    def guild_id(self) -> GuildID:
        return self.channel.guild_id


@dataclass(frozen=True, slots=True)
class MessageEnvelope:
    """Everything the engine needs to know about one inbound message."""

    ref: MessageRef
    author: AuthorRef
    content: str
    guild_name: str = ""

    @property
    def guild_id(self) -> GuildID:
        return self.ref.guild_id

    @property
    def channel(self) -> ChannelRef:
        return self.ref.channel
