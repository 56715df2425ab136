"""Per-message facts derived once and shared by every detector."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from modguard.datatypes.platform_refs import AuthorRef, ChannelRef
from modguard.detection.patterns import DEFAULT_TABLES, DetectionTables

_UPPERCASE = re.compile(r"[A-Z]")


@dataclass(frozen=True, slots=True)
class MessageFacts:
    """Ephemeral view of one message; never persisted."""

    raw_text: str
    lower_text: str
    mention_count: int
    caps_ratio: float
    author: Optional[AuthorRef] = None
    channel: Optional[ChannelRef] = None

    @property
    def length(self) -> int:
        return len(self.raw_text)

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        author: AuthorRef | None = None,
        channel: ChannelRef | None = None,
        tables: DetectionTables = DEFAULT_TABLES,
    ) -> "MessageFacts":
        text = text or ""
        caps_ratio = len(_UPPERCASE.findall(text)) / len(text) if text else 0.0
        return cls(
            raw_text=text,
            lower_text=text.lower(),
            mention_count=len(tables.mention_pattern.findall(text)),
            caps_ratio=caps_ratio,
            author=author,
            channel=channel,
        )
