"""
Entry point of automatic moderation for a single message.

The engine checks the guild's configuration, classifies the message and, if
it is flagged, runs the enforcement pipeline. It returns an
:class:`EnforcementReport` for the host to record, or ``None`` when
moderation is off for the guild.
"""

from __future__ import annotations

from typing import Optional

from modguard.configuration.moderation_config import TenantModerationConfig
from modguard.configuration.tenant_config_store import TenantConfigStore
from modguard.datatypes.discord_datatypes import GuildID
from modguard.datatypes.platform_refs import MessageEnvelope
from modguard.detection.classifier import classify_facts
from modguard.detection.message_facts import MessageFacts
from modguard.detection.patterns import DEFAULT_TABLES, DetectionTables
from modguard.moderation.enforcement_datatypes import EnforcementReport, ModerationState
from modguard.moderation.enforcement_pipeline import EnforcementPipeline
from modguard.util.logger import get_logger

logger = get_logger("moderation_engine")


class ModerationEngine:
    """Gate, classify and enforce."""

    def __init__(
        self,
        config_store: TenantConfigStore,
        pipeline: EnforcementPipeline,
        tables: DetectionTables = DEFAULT_TABLES,
    ) -> None:
        self.config_store = config_store
        self.pipeline = pipeline
        self.tables = tables

    async def load_config(self, guild_id: GuildID) -> Optional[TenantModerationConfig]:
        """Fetch the guild config; store failures count as moderation disabled."""
        try:
            return await self.config_store.get(guild_id)
        except Exception as exc:
            logger.error("[ENGINE] Could not load moderation config for guild %s: %s", guild_id, exc)
            return None

    async def handle_message(self, envelope: MessageEnvelope) -> Optional[EnforcementReport]:
        config = await self.load_config(envelope.guild_id)
        if config is None or not config.enabled:
            return None

        facts = MessageFacts.from_text(
            envelope.content,
            author=envelope.author,
            channel=envelope.channel,
            tables=self.tables,
        )
        report = EnforcementReport(
            state=ModerationState.EVALUATED,
            classification=classify_facts(facts, self.tables),
        )

        if not report.classification.is_spam:
            report.state = ModerationState.CLEAN
            return report

        report.state = ModerationState.FLAGGED
        logger.info(
            "[ENGINE] Flagged message %s from %s in guild %s (score %.2f): %s",
            envelope.ref.message_id,
            envelope.author.user_id,
            envelope.guild_id,
            report.classification.score,
            ", ".join(report.classification.reasons),
        )
        report.outcomes = await self.pipeline.run(envelope, report.classification, config)
        report.state = ModerationState.ENFORCED
        return report

    async def shutdown(self) -> None:
        await self.pipeline.shutdown()
