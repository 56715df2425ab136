"""
Per-guild moderation configuration.

:class:`TenantModerationConfig` is the only shape the moderation engine sees.
Rows coming back from storage (or from an admin command) are coerced through
:meth:`TenantModerationConfig.from_mapping` so the engine never deals with
malformed values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from modguard.datatypes.discord_datatypes import ChannelID, GuildID, UserID


class Language(Enum):
    """Languages supported for user-facing moderation text."""

    ENGLISH = "en"
    PORTUGUESE = "pt"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> "Language":
        """Lenient conversion; anything unknown falls back to English."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ENGLISH

    @property
    def display_name(self) -> str:
        return "English" if self is Language.ENGLISH else "Português"


@dataclass(frozen=True, slots=True)
class TenantModerationConfig:
    """Automod settings of one guild."""

    guild_id: GuildID
    enabled: bool = False
    log_channel_id: Optional[ChannelID] = None
    language: Language = Language.ENGLISH
    enabled_at: Optional[datetime] = None
    enabled_by: Optional[UserID] = None

    @classmethod
    def from_mapping(cls, guild_id: GuildID | int, data: Mapping[str, Any]) -> "TenantModerationConfig":
        """Build a config from a loosely typed mapping such as a database row."""
        enabled_at = data.get("enabled_at")
        if isinstance(enabled_at, str):
            try:
                enabled_at = datetime.fromisoformat(enabled_at)
            except ValueError:
                enabled_at = None
        elif not isinstance(enabled_at, datetime):
            enabled_at = None

        return cls(
            guild_id=GuildID(guild_id),
            enabled=bool(data.get("enabled", False)),
            log_channel_id=ChannelID.parse(data.get("log_channel_id")),
            language=Language.parse(data.get("language")),
            enabled_at=enabled_at,
            enabled_by=UserID.parse(data.get("enabled_by")),
        )

    def enable(self, by: UserID | None = None, log_channel_id: ChannelID | None = None) -> "TenantModerationConfig":
        """Return an enabled copy, stamping who enabled it and when."""
        return replace(
            self,
            enabled=True,
            log_channel_id=log_channel_id if log_channel_id is not None else self.log_channel_id,
            enabled_at=datetime.now(timezone.utc),
            enabled_by=by,
        )

    def disable(self) -> "TenantModerationConfig":
        return replace(self, enabled=False)
