"""
Lexical string similarity.

Edit-distance based scoring for short identifier strings (company names,
domains). Containment is treated as a strong but imperfect signal so that
"acme" never scores as a perfect match for "acme corp international".
"""

from typing import Optional

from rapidfuzz.distance import Levenshtein

from config.settings import settings

# Containment scores are scaled below a true exact match
CONTAINMENT_FACTOR = 0.95


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Similarity between two strings in [0, 1].

    - 1.0 on exact (case-insensitive) match
    - shorter/longer * 0.95 when one contains the other
    - 1 - distance/max_length otherwise
    """
    if not a or not b:
        return 0.0

    s1 = a.strip().lower()
    s2 = b.strip().lower()
    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    if s1 in s2 or s2 in s1:
        shorter, longer = sorted((s1, s2), key=len)
        return len(shorter) / len(longer) * CONTAINMENT_FACTOR

    max_len = max(len(s1), len(s2))
    return max(0.0, 1 - edit_distance(s1, s2) / max_len)


def fuzzy_match(
    a: Optional[str],
    b: Optional[str],
    threshold: Optional[float] = None,
) -> bool:
    """Check whether two strings are at least ``threshold`` similar."""
    if threshold is None:
        threshold = settings.FUZZY_MATCH_THRESHOLD
    return similarity(a, b) >= threshold
