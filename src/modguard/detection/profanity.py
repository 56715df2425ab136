"""
Profanity lookup with a leetspeak fallback pass.

The plain pass matches every listed word as a whole word against the
lowercased text. The second pass rewrites common digit/symbol substitutions
(``sh1t`` -> ``shit``) and matches again; words only found there are tagged
with a ``(l33t)`` suffix and never counted twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from modguard.detection.patterns import DEFAULT_TABLES, DetectionTables

LEET_SUFFIX = " (l33t)"


@dataclass(slots=True)
class ProfanityMatch:
    """Result of a profanity scan."""

    words: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.words)

    @property
    def count(self) -> int:
        return len(self.words)

    @property
    def language_label(self) -> str:
        return " & ".join(self.languages)

    def _add_language(self, language: str) -> None:
        if language not in self.languages:
            self.languages.append(language)


def leet_normalize(text: str, tables: DetectionTables = DEFAULT_TABLES) -> str:
    """Lowercase ``text`` and undo the character substitutions of the leet table."""
    return text.lower().translate(tables.leet_table)


def find_profanity(text: str, tables: DetectionTables = DEFAULT_TABLES) -> ProfanityMatch:
    """Scan ``text`` against every configured word list."""
    lowered = text.lower()
    match = ProfanityMatch()
    plain_hits = set()

    for word_list in tables.word_lists:
        for word, matcher in word_list:
            if matcher.search(lowered):
                match.words.append(word)
                plain_hits.add(word)
                match._add_language(word_list.language)

    leet_text = leet_normalize(lowered, tables)
    if leet_text == lowered:
        return match

    for word_list in tables.word_lists:
        for word, matcher in word_list:
            if word not in plain_hits and matcher.search(leet_text):
                match.words.append(word + LEET_SUFFIX)
                match._add_language(word_list.language)

    return match
