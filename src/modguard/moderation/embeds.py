"""
Platform-neutral embed payloads for the audit log post and the user DM.

The engine builds :class:`EmbedPayload` values; the Discord host turns them
into ``discord.Embed`` objects (see ``modguard.bot.embed_renderer``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from modguard.datatypes.platform_refs import MessageEnvelope
from modguard.detection.classifier import ClassificationResult
from modguard.moderation.enforcement_datatypes import EnforcementAction
from modguard.moderation.messages import ModerationTexts

DM_COLOR = 0xFFA500


class Severity(Enum):
    """Audit severity bands with their embed colours."""

    LOW = ("low", 0xFFA500)
    MEDIUM = ("medium", 0xF44336)
    HIGH = ("high", 0x9C27B0)
    CRITICAL = ("critical", 0x000000)

    def __init__(self, label: str, color: int) -> None:
        self.label = label
        self.color = color

    def __str__(self) -> str:
        return self.label

    @classmethod
    def for_score(cls, score: float) -> "Severity":
        if score >= 0.8:
            return cls.CRITICAL
        if score >= 0.6:
            return cls.HIGH
        if score >= 0.4:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True, slots=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True, slots=True)
class EmbedPayload:
    """Minimal embed description independent of any chat library."""

    title: str
    description: str = ""
    color: int = 0
    fields: Tuple[EmbedField, ...] = field(default_factory=tuple)
    footer: Optional[str] = None
    timestamp: Optional[datetime] = None


def bullet_list(items: Iterable[str], empty: str = "• none") -> str:
    lines = [f"• {item}" for item in items]
    return "\n".join(lines) if lines else empty


def format_actions(actions: Sequence[EnforcementAction], timeout_minutes: int, minutes_label: str = "min") -> str:
    """Render actions as bullets; timeouts carry their duration."""
    labels = []
    for action in actions:
        if action is EnforcementAction.TIMEOUT:
            labels.append(f"{action.value} ({timeout_minutes} {minutes_label})")
        else:
            labels.append(action.value)
    return bullet_list(labels)


def quote_content(content: str, limit: int) -> str:
    snippet = content[:limit].replace("```", "'''")
    return f"```{snippet}```"


def build_audit_embed(
    envelope: MessageEnvelope,
    classification: ClassificationResult,
    actions_taken: Sequence[EnforcementAction],
    timeout_minutes: int,
    content_limit: int = 500,
) -> EmbedPayload:
    """Audit log post for a flagged message."""
    severity = Severity.for_score(classification.score)
    label = severity.label.upper()
    confidence = round(classification.score * 100)

    fields = (
        EmbedField("👤 User", envelope.author.describe(), inline=True),
        EmbedField("📍 Channel", envelope.channel.mention, inline=True),
        EmbedField("📊 Confidence", f"{confidence}% ({label})", inline=True),
        EmbedField("📝 Message Content", quote_content(envelope.content, content_limit)),
        EmbedField("⚠️ Violations Detected", bullet_list(classification.reasons)),
        EmbedField("⚡ Actions Taken", format_actions(actions_taken, timeout_minutes)),
    )

    return EmbedPayload(
        title="🛡️ AutoMod Action",
        description=f"**{', '.join(classification.reasons)} detected and handled**",
        color=severity.color,
        fields=fields,
        footer=f"User ID: {envelope.author.user_id} | Severity: {label}",
        timestamp=datetime.now(timezone.utc),
    )


def build_dm_embed(
    envelope: MessageEnvelope,
    classification: ClassificationResult,
    actions_taken: Sequence[EnforcementAction],
    timeout_minutes: int,
    texts: ModerationTexts,
) -> EmbedPayload:
    """Localized notice sent to the author of a flagged message."""
    fields = (
        EmbedField(texts.dm_reasons, bullet_list(classification.reasons)),
        EmbedField(texts.dm_actions, format_actions(actions_taken, timeout_minutes, texts.minutes)),
        EmbedField(texts.dm_appeal, texts.dm_appeal_value),
    )
    return EmbedPayload(
        title=texts.dm_title,
        description=texts.description_for(envelope.guild_name),
        color=DM_COLOR,
        fields=fields,
        footer=f"{texts.dm_footer} | User ID: {envelope.author.user_id}",
    )
