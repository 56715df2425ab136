"""
Static pattern tables and word lists used by the detectors.

Everything here is built once at import time and never mutated. Detectors
receive a :class:`DetectionTables` instance as a parameter instead of reading
module globals, so tests can hand in a custom table set.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

# Fake Discord Nitro / boost offers
NITRO_PATTERNS: Tuple[str, ...] = (
    r"free\s*discord\s*nitro",
    r"free\s*discord\s*boost",
    r"discord\s*gift",
    r"nitro\s*gift",
    r"free\s*nitro",
    r"claim\s*your\s*nitro",
    r"discord\s*nitro\s*generator",
    r"get\s*free\s*discord",
)

# Phishing links and platform-name typos
SUSPICIOUS_URL_PATTERNS: Tuple[str, ...] = (
    r"discord\.gift",
    r"discord-nitro",
    r"discrod",
    r"discordapp-gift",
    r"steam-nitro",
    r"disocrd",
)

SPAM_PHRASE_PATTERNS: Tuple[str, ...] = (
    r"click\s*here\s*now",
    r"limited\s*time\s*offer",
    r"act\s*fast",
    r"100%\s*free",
    r"no\s*survey",
    r"download\s*now",
    r"congratulations.*winner",
)

MENTION_PATTERN = r"<@[!&]?\d+>"

ENGLISH_PROFANITY: Tuple[str, ...] = (
    "damn", "hell", "shit", "fuck", "bitch", "ass", "asshole", "bastard",
    "crap", "piss", "whore", "slut", "retard", "idiot", "moron", "stupid",
    "dumb", "loser", "gay", "fag", "nigga", "negro", "chink", "spic",
)

PORTUGUESE_PROFANITY: Tuple[str, ...] = (
    "merda", "porra", "caralho", "foda", "puta", "vadia", "vagabunda",
    "cacete", "droga", "inferno", "diabo", "burro", "idiota", "imbecil",
    "otário", "babaca", "cuzão", "fdp", "filho da puta", "vai se foder",
    "cu", "buceta", "piroca", "rola", "pau", "viado", "bicha", "sapatão",
    "preto", "nego", "crioulo",
)

# Character substitutions applied by the leetspeak pass, in order
LEET_SUBSTITUTIONS: Tuple[Tuple[str, str], ...] = (
    ("0", "o"),
    ("1", "i"),
    ("3", "e"),
    ("4", "a"),
    ("5", "s"),
    ("7", "t"),
    ("@", "a"),
    ("*", ""),
)

# Letter combinations frequent in English and Portuguese text
COMMON_LETTER_COMBOS: Tuple[str, ...] = (
    "th", "er", "on", "an", "in", "ed", "nd", "to", "en", "ou",
    "ar", "es", "te", "de", "da", "que", "do", "em", "um", "os",
)

VOWELS = "aeiou"
CONSONANTS = "bcdfghjklmnpqrstvwxyz"


@dataclass(frozen=True, slots=True)
class WordList:
    """A profanity list for one language with its whole-word matchers."""

    language: str
    words: Tuple[str, ...]
    matchers: Tuple[re.Pattern[str], ...]

    @classmethod
    def build(cls, language: str, words: Iterable[str]) -> "WordList":
        words = tuple(words)
        matchers = tuple(
            re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in words
        )
        return cls(language=language, words=words, matchers=matchers)

    def __iter__(self):
        return iter(zip(self.words, self.matchers))


@dataclass(frozen=True, slots=True)
class DetectionTables:
    """Immutable bundle of every table the detectors read."""

    nitro_patterns: Tuple[re.Pattern[str], ...]
    suspicious_url_patterns: Tuple[re.Pattern[str], ...]
    spam_phrase_patterns: Tuple[re.Pattern[str], ...]
    mention_pattern: re.Pattern[str]
    word_lists: Tuple[WordList, ...]
    leet_table: Mapping[int, str]
    common_combos: Tuple[str, ...]

    @classmethod
    def build(
        cls,
        *,
        nitro: Iterable[str] = NITRO_PATTERNS,
        suspicious_urls: Iterable[str] = SUSPICIOUS_URL_PATTERNS,
        spam_phrases: Iterable[str] = SPAM_PHRASE_PATTERNS,
        word_lists: Iterable[Tuple[str, Iterable[str]]] = (
            ("English", ENGLISH_PROFANITY),
            ("Portuguese", PORTUGUESE_PROFANITY),
        ),
        leet_substitutions: Iterable[Tuple[str, str]] = LEET_SUBSTITUTIONS,
        common_combos: Iterable[str] = COMMON_LETTER_COMBOS,
    ) -> "DetectionTables":
        """Compile the given pattern sources into a ready-to-use table set."""
        return cls(
            nitro_patterns=_compile_all(nitro),
            suspicious_url_patterns=_compile_all(suspicious_urls),
            spam_phrase_patterns=_compile_all(spam_phrases),
            mention_pattern=re.compile(MENTION_PATTERN),
            word_lists=tuple(WordList.build(language, words) for language, words in word_lists),
            leet_table=MappingProxyType(str.maketrans({src: dst for src, dst in leet_substitutions})),
            common_combos=tuple(common_combos),
        )


def _compile_all(patterns: Iterable[str]) -> Tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


DEFAULT_TABLES = DetectionTables.build()
