"""Conversion of engine embed payloads into py-cord embeds."""

import discord

from modguard.moderation.embeds import EmbedPayload


def render_embed(payload: EmbedPayload) -> discord.Embed:
    embed = discord.Embed(
        title=payload.title,
        description=payload.description or None,
        color=discord.Color(payload.color),
        timestamp=payload.timestamp,
    )
    for field in payload.fields:
        embed.add_field(name=field.name, value=field.value, inline=field.inline)
    if payload.footer:
        embed.set_footer(text=payload.footer)
    return embed
