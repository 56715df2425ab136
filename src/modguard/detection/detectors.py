"""
The fixed detector set.

Every detector is a pure function ``(MessageFacts, DetectionTables) ->
DetectionSignal | None``. :data:`DETECTORS` holds them in evaluation order,
which is also the order reasons appear in a classification.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from modguard.detection.heuristics import nonsense_score, randomness_score
from modguard.detection.message_facts import MessageFacts
from modguard.detection.patterns import DetectionTables
from modguard.detection.profanity import find_profanity

_REPEATED_CHAR_RUN = re.compile(r"(.)\1{10,}")
_REPEATED_UNIT = re.compile(r"(.+?)\1{3,}")
_DOUBLED_CHARS = re.compile(r"(.)\1+")


@dataclass(frozen=True, slots=True)
class DetectionSignal:
    """A weighted reason contributed by one detector."""

    weight: float
    reason: str


Detector = Callable[[MessageFacts, DetectionTables], Optional[DetectionSignal]]


def _first_match(patterns: Iterable[re.Pattern[str]], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def detect_fake_nitro(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Fake Nitro or boost giveaway wording."""
    if _first_match(tables.nitro_patterns, facts.lower_text):
        return DetectionSignal(0.8, "Fake Discord Nitro/Boost offer detected")
    return None


def detect_suspicious_url(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Look-alike Discord domains and gift links."""
    if _first_match(tables.suspicious_url_patterns, facts.lower_text):
        return DetectionSignal(0.7, "Suspicious URL detected")
    return None


def detect_mass_mentions(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """More than five user or role mentions."""
    if facts.mention_count > 5:
        return DetectionSignal(0.5, f"Mass mentions detected ({facts.mention_count})")
    return None


def detect_excessive_caps(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Over 70% capital letters in a message longer than ten characters."""
    if facts.caps_ratio > 0.7 and facts.length > 10:
        return DetectionSignal(0.3, "Excessive capital letters")
    return None


def detect_repeated_characters(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """One character repeated eleven or more times in a row."""
    if _REPEATED_CHAR_RUN.search(facts.raw_text):
        return DetectionSignal(0.4, "Excessive repeated characters")
    return None


def detect_repeated_pattern(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """The whole message is one unit repeated at least four times."""
    if facts.length > 5 and _REPEATED_UNIT.fullmatch(facts.raw_text.strip()):
        return DetectionSignal(0.6, "Repeated message pattern detected")
    return None


def detect_short_repetition(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Short messages made mostly of doubled characters."""
    if not 0 < facts.length < 10:
        return None
    repeated = sum(len(match.group(0)) for match in _DOUBLED_CHARS.finditer(facts.raw_text))
    if repeated > facts.length * 0.5:
        return DetectionSignal(0.7, "Simple spam pattern detected")
    return None


def detect_randomness(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Keyboard mashing, judged by :func:`randomness_score`."""
    if facts.length > 3 and randomness_score(facts.raw_text, tables) > 0.7:
        return DetectionSignal(0.8, "Random character spam detected")
    return None


def detect_nonsense(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Short nonsense such as spelled-out letters, judged by :func:`nonsense_score`."""
    if 2 <= facts.length <= 15 and nonsense_score(facts.raw_text) > 0.6:
        return DetectionSignal(0.7, "Nonsense text detected")
    return None


def detect_profanity(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Listed words in either language, including leetspeak spellings."""
    match = find_profanity(facts.raw_text, tables)
    if not match.found:
        return None
    noun = "word" if match.count == 1 else "words"
    return DetectionSignal(0.8, f"Profanity detected: {match.language_label} ({match.count} {noun})")


def detect_spam_phrases(facts: MessageFacts, tables: DetectionTables) -> Optional[DetectionSignal]:
    """Classic advertising phrases such as "click here now"."""
    if _first_match(tables.spam_phrase_patterns, facts.lower_text):
        return DetectionSignal(0.3, "Common spam phrase detected")
    return None


DETECTORS: Tuple[Detector, ...] = (
    detect_fake_nitro,
    detect_suspicious_url,
    detect_mass_mentions,
    detect_excessive_caps,
    detect_repeated_characters,
    detect_repeated_pattern,
    detect_short_repetition,
    detect_randomness,
    detect_nonsense,
    detect_profanity,
    detect_spam_phrases,
)
