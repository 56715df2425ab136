"""General purpose slash commands."""

import math

import discord
from discord.ext import commands

from modguard.util.logger import get_logger

logger = get_logger("general_commands")


class GeneralCog(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        logger.info("[GENERAL CMDS] General cog loaded")

    @commands.slash_command(name="ping", description="Check that the bot is responsive.")
    async def ping(self, ctx: discord.ApplicationContext):
        latency = self.bot.latency
        latency_ms = 0 if latency is None or math.isnan(latency) else round(latency * 1000)
        await ctx.respond(f"🏓 Pong! Latency: {latency_ms} ms", ephemeral=True)


def setup(bot):
    bot.add_cog(GeneralCog(bot))
