"""
Discord host for Modguard.

- **discord_platform.py**: py-cord implementation of the moderation capability
  surface and conversion of incoming messages into envelopes
- **embed_renderer.py**: turns engine embed payloads into ``discord.Embed``
- **cogs/**: message listener and slash commands
"""
