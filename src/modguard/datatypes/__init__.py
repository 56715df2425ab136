"""
Datatypes shared across Modguard.

- **discord_datatypes.py**: typed snowflake wrappers (GuildID, ChannelID, UserID, MessageID).
- **platform_refs.py**: frozen references (author, channel, message) handed to the engine.
"""
