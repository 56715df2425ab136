"""
Storage of per-guild moderation configuration.

The moderation engine only reads (:meth:`TenantConfigStore.get`); the admin
commands own the write side. Every value coming out of a store has been
coerced through :meth:`TenantModerationConfig.from_mapping`.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Dict, Optional

from modguard.configuration.moderation_config import Language, TenantModerationConfig
from modguard.database.db_connection import ConnectionManager, db_connection
from modguard.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from modguard.util.logger import get_logger

logger = get_logger("tenant_config_store")


class TenantConfigStore:
    """Read/write access to :class:`TenantModerationConfig` records."""

    async def get(self, guild_id: GuildID) -> Optional[TenantModerationConfig]:
        """Return the guild's config, or None if it was never configured."""
        raise NotImplementedError

    async def save(self, config: TenantModerationConfig) -> TenantModerationConfig:
        raise NotImplementedError

    async def get_or_default(self, guild_id: GuildID) -> TenantModerationConfig:
        config = await self.get(guild_id)
        return config if config is not None else TenantModerationConfig(guild_id=GuildID(guild_id))

    async def set_enabled(
        self,
        guild_id: GuildID,
        enabled: bool,
        *,
        by: UserID | None = None,
        log_channel_id: ChannelID | None = None,
    ) -> TenantModerationConfig:
        """Enable or disable automod; enabling stamps the time and the admin."""
        current = await self.get_or_default(guild_id)
        updated = current.enable(by=by, log_channel_id=log_channel_id) if enabled else current.disable()
        return await self.save(updated)

    async def set_language(self, guild_id: GuildID, language: Language | str) -> TenantModerationConfig:
        current = await self.get_or_default(guild_id)
        return await self.save(replace(current, language=Language.parse(language)))


class InMemoryTenantConfigStore(TenantConfigStore):
    """Dictionary-backed store for tests and dry runs."""

    def __init__(self, *configs: TenantModerationConfig) -> None:
        self._configs: Dict[GuildID, TenantModerationConfig] = {c.guild_id: c for c in configs}

    async def get(self, guild_id: GuildID) -> Optional[TenantModerationConfig]:
        return self._configs.get(GuildID(guild_id))

    async def save(self, config: TenantModerationConfig) -> TenantModerationConfig:
        self._configs[config.guild_id] = config
        return config


class SqliteTenantConfigStore(TenantConfigStore):
    """Store backed by the ``tenant_moderation_config`` table, cached in memory.

    The cache is authoritative after the first read of a guild because all
    writes go through this object.
    """

    def __init__(self, connection: ConnectionManager | None = None) -> None:
        self._db = connection or db_connection
        self._cache: Dict[GuildID, Optional[TenantModerationConfig]] = {}
        self._lock = asyncio.Lock()

    async def get(self, guild_id: GuildID) -> Optional[TenantModerationConfig]:
        guild_id = GuildID(guild_id)
        if guild_id in self._cache:
            return self._cache[guild_id]

        async with self._db.read() as conn:
            async with conn.execute(
                """
                SELECT guild_id, enabled, log_channel_id, language, enabled_at, enabled_by
                FROM tenant_moderation_config
                WHERE guild_id = ?
                """,
                (guild_id.to_int(),),
            ) as cursor:
                row = await cursor.fetchone()

        config = None if row is None else TenantModerationConfig.from_mapping(guild_id, _row_to_mapping(row))
        # a save() that finished while we were reading wins over our row
        return self._cache.setdefault(guild_id, config)

    async def save(self, config: TenantModerationConfig) -> TenantModerationConfig:
        async with self._lock:
            async with self._db.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO tenant_moderation_config (
                        guild_id, enabled, log_channel_id, language, enabled_at, enabled_by
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(guild_id) DO UPDATE SET
                        enabled        = excluded.enabled,
                        log_channel_id = excluded.log_channel_id,
                        language       = excluded.language,
                        enabled_at     = excluded.enabled_at,
                        enabled_by     = excluded.enabled_by
                    """,
                    (
                        config.guild_id.to_int(),
                        1 if config.enabled else 0,
                        config.log_channel_id.to_int() if config.log_channel_id else None,
                        config.language.value,
                        config.enabled_at.isoformat() if config.enabled_at else None,
                        config.enabled_by.to_int() if config.enabled_by else None,
                    ),
                )
            self._cache[config.guild_id] = config

        logger.debug(
            "[CONFIG STORE] Saved guild %s: enabled=%s log_channel=%s language=%s",
            config.guild_id,
            config.enabled,
            config.log_channel_id,
            config.language,
        )
        return config


def _row_to_mapping(row: Any) -> Dict[str, Any]:
    return {
        "enabled": row[1],
        "log_channel_id": row[2],
        "language": row[3],
        "enabled_at": row[4],
        "enabled_by": row[5],
    }
