"""Letter-composition heuristics for keyboard-mash and nonsense messages."""

from __future__ import annotations

import re

from modguard.detection.patterns import CONSONANTS, DEFAULT_TABLES, VOWELS, DetectionTables

_NON_LETTERS = re.compile(r"[^a-z]")
_CONSONANT_RUN = re.compile(rf"[{CONSONANTS}]{{4,}}")


def clean_letters(text: str) -> str:
    """Return only the ASCII letters of ``text``, lowercased."""
    return _NON_LETTERS.sub("", text.lower())


def randomness_score(text: str, tables: DetectionTables = DEFAULT_TABLES) -> float:
    """Score in [0, 1] of how much ``text`` looks like random key presses."""
    cleaned = clean_letters(text)
    if len(cleaned) < 3:
        return 0.0

    score = 0.0

    runs = len(_CONSONANT_RUN.findall(cleaned))
    if runs:
        score += min(runs * 0.3, 0.5)

    vowel_ratio = sum(1 for char in cleaned if char in VOWELS) / len(cleaned)
    if vowel_ratio < 0.15 or vowel_ratio > 0.8:
        score += 0.4

    if len(cleaned) > 4 and not any(combo in cleaned for combo in tables.common_combos):
        score += 0.5

    return min(score, 1.0)


def nonsense_score(text: str) -> float:
    """Score in [0, 1] for short runs of letters that do not form words."""
    if len(clean_letters(text)) < 2:
        return 0.0

    score = 0.0
    tokens = text.strip().split()

    single_chars = sum(1 for token in tokens if len(token) == 1)
    if single_chars > len(tokens) * 0.6 and len(tokens) > 2:
        score += 0.8

    weird = 0
    for token in tokens:
        if not 2 <= len(token) <= 6:
            continue
        folded = token.lower()
        vowels = sum(1 for char in folded if char in VOWELS)
        consonants = sum(1 for char in folded if char in CONSONANTS)
        if vowels == 0 or consonants > len(token) * 0.8:
            weird += 1

    if weird and len(tokens) > 1:
        score += weird / len(tokens) * 0.7

    return min(score, 1.0)
