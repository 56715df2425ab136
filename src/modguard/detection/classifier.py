"""
Score aggregation over the detector set.

``classify`` is shared by the live moderation engine and the ``/automod test``
dry run, so both always agree on a verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from modguard.detection.detectors import DETECTORS
from modguard.detection.message_facts import MessageFacts
from modguard.detection.patterns import DEFAULT_TABLES, DetectionTables

SPAM_THRESHOLD = 0.6


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Aggregated verdict for one message."""

    score: float
    is_spam: bool
    reasons: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def confidence(self) -> float:
        return self.score

    def as_dict(self) -> Dict[str, Any]:
        return {"isSpam": self.is_spam, "confidence": self.score, "reasons": list(self.reasons)}


def classify_facts(facts: MessageFacts, tables: DetectionTables = DEFAULT_TABLES) -> ClassificationResult:
    """Run every detector over ``facts`` and aggregate their signals."""
    total = 0.0
    reasons = []
    for detector in DETECTORS:
        signal = detector(facts, tables)
        if signal is None:
            continue
        total += signal.weight
        reasons.append(signal.reason)

    score = min(1.0, max(0.0, total))
    return ClassificationResult(score=score, is_spam=score >= SPAM_THRESHOLD, reasons=tuple(reasons))


def classify(text: str, tables: DetectionTables = DEFAULT_TABLES) -> ClassificationResult:
    """Classify a bare message text. Total: never raises for any string."""
    return classify_facts(MessageFacts.from_text(text, tables=tables), tables)
