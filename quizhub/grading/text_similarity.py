"""
Text similarity primitives used by text-answer grading.
"""

from __future__ import annotations

import re

_LEADING_ARTICLE = re.compile(r"^(a|an|the)\s+", re.IGNORECASE)
_PUNCTUATION = re.compile(r"""[.,!?;:'"()]""")
_WHITESPACE = re.compile(r"\s+")


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance: minimum single-character inserts, deletes and
    substitutions that turn ``a`` into ``b``.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Two-row DP over the (len(a)+1) x (len(b)+1) matrix
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current[j] = min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[len(b)]


def similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1]: 1.0 for identical strings, 0.0 when exactly one is empty.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    distance = edit_distance(a, b)
    return max(0.0, 1.0 - distance / max(len(a), len(b)))


def normalize(text: str, case_sensitive: bool = False) -> str:
    """
    Normalize text for comparison.

    Trims, drops one leading article (a/an/the), strips common
    punctuation, collapses whitespace and lowercases unless
    ``case_sensitive``.
    """
    normalized = text.strip()
    normalized = _LEADING_ARTICLE.sub("", normalized, count=1)
    normalized = _PUNCTUATION.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    if not case_sensitive:
        normalized = normalized.lower()

    return normalized
