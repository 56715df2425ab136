"""
Cogs for the Modguard bot.

Each module defines its cog classes and a ``setup`` function taking the bot and
the services it needs. The cogs are loaded explicitly in main.py.
"""
