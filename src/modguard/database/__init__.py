"""
Database package for Modguard.

- **db_connection.py**: the shared aiosqlite connection (``db_connection``).
- **db_schema.py**: table, index and trigger creation.
- **moderation_log.py**: the moderation event log.

``init_database`` opens the shared connection and creates the schema.
"""

from pathlib import Path

from modguard.database.db_connection import ConnectionManager, db_connection
from modguard.database.db_schema import SchemaManager


async def init_database(path: Path, connection: ConnectionManager | None = None) -> ConnectionManager:
    manager = connection or db_connection
    await manager.open(path)
    await SchemaManager.initialize_schema(manager.connection)
    return manager
