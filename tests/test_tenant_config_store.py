import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from modguard.configuration.moderation_config import Language, TenantModerationConfig
from modguard.configuration.tenant_config_store import InMemoryTenantConfigStore, SqliteTenantConfigStore
from modguard.database import init_database
from modguard.database.db_connection import ConnectionManager
from modguard.datatypes.discord_datatypes import ChannelID, GuildID, UserID


@pytest_asyncio.fixture
async def connection(tmp_path):
    manager = ConnectionManager()
    await init_database(tmp_path / "test.db", manager)
    yield manager
    await manager.close()


class TestTenantModerationConfig:
    def test_defaults(self):
        config = TenantModerationConfig(guild_id=GuildID(1))
        assert config.enabled is False
        assert config.log_channel_id is None
        assert config.language is Language.ENGLISH

    def test_from_mapping_coerces_bad_values(self):
        config = TenantModerationConfig.from_mapping(
            1,
            {"enabled": 1, "log_channel_id": "not-a-channel", "language": "klingon", "enabled_at": "yesterday"},
        )
        assert config.enabled is True
        assert config.log_channel_id is None
        assert config.language is Language.ENGLISH
        assert config.enabled_at is None

    def test_from_mapping_parses_values(self):
        config = TenantModerationConfig.from_mapping(
            "42",
            {
                "enabled": True,
                "log_channel_id": "123",
                "language": "PT",
                "enabled_at": "2024-05-01T12:00:00+00:00",
                "enabled_by": 77,
            },
        )
        assert config.guild_id == GuildID(42)
        assert config.log_channel_id == ChannelID(123)
        assert config.language is Language.PORTUGUESE
        assert config.enabled_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        assert config.enabled_by == UserID(77)

    def test_enable_keeps_existing_log_channel(self):
        config = TenantModerationConfig(guild_id=GuildID(1), log_channel_id=ChannelID(5))
        enabled = config.enable(by=UserID(9))
        assert enabled.enabled is True
        assert enabled.log_channel_id == ChannelID(5)
        assert enabled.enabled_by == UserID(9)
        assert enabled.enabled_at is not None


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_missing_guild(self):
        store = InMemoryTenantConfigStore()
        assert await store.get(GuildID(1)) is None
        default = await store.get_or_default(GuildID(1))
        assert default.enabled is False

    @pytest.mark.asyncio
    async def test_set_enabled_and_language(self):
        store = InMemoryTenantConfigStore()
        await store.set_enabled(GuildID(1), True, by=UserID(2), log_channel_id=ChannelID(3))
        await store.set_language(GuildID(1), "pt")

        config = await store.get(GuildID(1))
        assert config.enabled is True
        assert config.log_channel_id == ChannelID(3)
        assert config.language is Language.PORTUGUESE


class TestSqliteStore:
    @pytest.mark.asyncio
    async def test_round_trip_through_database(self, connection):
        store = SqliteTenantConfigStore(connection)
        await store.set_enabled(GuildID(10), True, by=UserID(20), log_channel_id=ChannelID(30))
        await store.set_language(GuildID(10), Language.PORTUGUESE)

        fresh = SqliteTenantConfigStore(connection)
        config = await fresh.get(GuildID(10))

        assert config is not None
        assert config.enabled is True
        assert config.log_channel_id == ChannelID(30)
        assert config.language is Language.PORTUGUESE
        assert config.enabled_by == UserID(20)
        assert config.enabled_at is not None

    @pytest.mark.asyncio
    async def test_unknown_guild_is_none(self, connection):
        store = SqliteTenantConfigStore(connection)
        assert await store.get(GuildID(999)) is None

    @pytest.mark.asyncio
    async def test_disable_keeps_other_settings(self, connection):
        store = SqliteTenantConfigStore(connection)
        await store.set_enabled(GuildID(10), True, log_channel_id=ChannelID(30))
        await store.set_enabled(GuildID(10), False)

        config = await SqliteTenantConfigStore(connection).get(GuildID(10))

        assert config.enabled is False
        assert config.log_channel_id == ChannelID(30)

    @pytest.mark.asyncio
    async def test_malformed_row_is_coerced(self, connection):
        async with connection.transaction() as conn:
            await conn.execute(
                "INSERT INTO tenant_moderation_config (guild_id, enabled, log_channel_id, language) VALUES (?, ?, ?, ?)",
                (11, 1, "general", "de"),
            )

        config = await SqliteTenantConfigStore(connection).get(GuildID(11))

        assert config.enabled is True
        assert config.log_channel_id is None
        assert config.language is Language.ENGLISH

    @pytest.mark.asyncio
    async def test_read_in_flight_does_not_overwrite_newer_save(self, connection, monkeypatch):
        store = SqliteTenantConfigStore(connection)
        row_read = asyncio.Event()
        release = asyncio.Event()
        original_read = connection.read

        @asynccontextmanager
        async def paused_read():
            async with original_read() as conn:
                yield conn
            row_read.set()
            await release.wait()

        monkeypatch.setattr(connection, "read", paused_read)

        reader = asyncio.create_task(store.get(GuildID(12)))
        await row_read.wait()
        await store.save(TenantModerationConfig(guild_id=GuildID(12), enabled=True))
        release.set()

        in_flight = await reader
        assert in_flight is not None and in_flight.enabled is True
        assert (await store.get(GuildID(12))).enabled is True
