from __future__ import annotations

import re
import unicodedata
from typing import Final, Iterable, Sequence

from rapidfuzz.distance import Levenshtein

_NON_LETTERS: Final = re.compile(r"[^a-z]")
_CAMEL_LOWER_UPPER: Final = re.compile(r"([a-z0-9])([A-Z])")
# 'JSONData' -> 'JSON Data' but keep plural acronyms like 'IDs' whole
_CAMEL_ACRONYM: Final = re.compile(r"([A-Z]+)([A-Z][a-z]{2,})")
_WORD_SPLIT: Final = re.compile(r"[^A-Za-z0-9]+")
_EDGE_QUOTES: Final = re.compile(r"^[\"']|[\"']$")


def normalize_text(value: str) -> str:
    """Generic normalization for free-text tokens (skills, tags).

    Steps:
    - unicode normalize (NFKC)
    - lowercase, trim
    - collapse internal whitespace
    - strip trailing punctuation
    """
    s = unicodedata.normalize("NFKC", value)
    s = s.lower().strip()
    s = re.sub(r"\s+", " ", s)
    s = re.sub(r"[\s\.,;:]+$", "", s)
    return s


def normalize_header(value: str) -> str:
    """Lowercase and keep letters only: 'Client Id' -> 'clientid'."""
    return _NON_LETTERS.sub("", value.lower().strip())


def split_words(name: str) -> list[str]:
    """Decompose a CamelCase / snake_case name into lowercase words.

    'RequestedTaskIDs' -> ['requested', 'task', 'ids']
    """
    s = _CAMEL_ACRONYM.sub(r"\1 \2", name)
    s = _CAMEL_LOWER_UPPER.sub(r"\1 \2", s)
    return [w.lower() for w in _WORD_SPLIT.split(s) if w]


def similarity(a: str, b: str) -> float:
    """1 - edit_distance / len(longer); two empty strings are identical."""
    if not a and not b:
        return 1.0
    return float(Levenshtein.normalized_similarity(a, b))


def strip_quotes(value: str) -> str:
    return _EDGE_QUOTES.sub("", value)


def normalize_id(value: str) -> str:
    """Identifier key: trimmed, unquoted, upper-cased."""
    return strip_quotes(value.strip()).strip().upper()


def header_matches_alias(header: str, alias: str) -> bool:
    h = normalize_header(header)
    a = normalize_header(alias)
    if not h or not a:
        return False
    if h == a:
        return True
    shorter = min(len(h), len(a))
    return shorter > 2 and (a in h or h in a)


def find_columns(headers: Sequence[str], aliases: Iterable[str]) -> list[str]:
    """Headers matching any alias, in alias order then header order, without repeats."""
    found: list[str] = []
    for alias in aliases:
        for h in headers:
            if h not in found and header_matches_alias(h, alias):
                found.append(h)
    return found
