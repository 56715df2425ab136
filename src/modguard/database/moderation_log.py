"""
Moderation event log.

One row per flagged message: who, where, the score, the reasons and what
every enforcement step did. Written by the Discord host after the engine
returns, never by the engine itself.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from modguard.database.db_connection import ConnectionManager, db_connection
from modguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from modguard.datatypes.platform_refs import MessageEnvelope
from modguard.moderation.enforcement_datatypes import EnforcementReport
from modguard.util.logger import get_logger

logger = get_logger("database_moderation_log")


@dataclass(frozen=True, slots=True)
class ModerationEvent:
    """A stored moderation event."""

    event_id: int
    guild_id: GuildID
    channel_id: ChannelID
    user_id: UserID
    message_id: MessageID
    score: float
    reasons: List[str]
    outcomes: List[Dict[str, Any]]
    timestamp: str


class ModerationLog:
    """Records enforcement reports and reads them back."""

    def __init__(self, connection: ConnectionManager | None = None) -> None:
        self._db = connection or db_connection

    async def record(self, envelope: MessageEnvelope, report: EnforcementReport) -> int:
        """
        Persist a report for a flagged message.

        Args:
            envelope: The message the report is about.
            report: The engine's report; clean reports are not recorded.

        Returns:
            The new row id, or 0 if nothing was written.
        """
        if not report.flagged:
            return 0

        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO moderation_events (guild_id, channel_id, user_id, message_id, score, reasons, outcomes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    envelope.guild_id.to_int(),
                    envelope.channel.channel_id.to_int(),
                    envelope.author.user_id.to_int(),
                    envelope.ref.message_id.to_int(),
                    report.classification.score,
                    json.dumps(list(report.classification.reasons)),
                    json.dumps([outcome.as_dict() for outcome in report.outcomes]),
                ),
            )
            event_id = cursor.lastrowid or 0
            await cursor.close()

        logger.debug(
            "[MODERATION LOG] Recorded event %s for user %s in guild %s",
            event_id,
            envelope.author.user_id,
            envelope.guild_id,
        )
        return event_id

    async def recent_events(self, guild_id: GuildID, limit: int = 20) -> List[ModerationEvent]:
        """Return the newest events of a guild, newest first."""
        async with self._db.read() as conn:
            async with conn.execute(
                """
                SELECT id, guild_id, channel_id, user_id, message_id, score, reasons, outcomes, timestamp
                FROM moderation_events
                WHERE guild_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (GuildID(guild_id).to_int(), limit),
            ) as cursor:
                rows = await cursor.fetchall()

        return [
            ModerationEvent(
                event_id=row[0],
                guild_id=GuildID(row[1]),
                channel_id=ChannelID(row[2]),
                user_id=UserID(row[3]),
                message_id=MessageID(row[4]),
                score=float(row[5]),
                reasons=json.loads(row[6] or "[]"),
                outcomes=json.loads(row[7] or "[]"),
                timestamp=str(row[8]),
            )
            for row in rows
        ]

    async def count_events(self, guild_id: GuildID) -> int:
        async with self._db.read() as conn:
            async with conn.execute(
                "SELECT COUNT(*) FROM moderation_events WHERE guild_id = ?",
                (GuildID(guild_id).to_int(),),
            ) as cursor:
                row = await cursor.fetchone()
        return int(row[0]) if row else 0
