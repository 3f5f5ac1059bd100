# src/fixmyhood/utils/text.py
"""Title tokenization and overlap scoring used by duplicate detection."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

MIN_TOKEN_LENGTH: Final[int] = 3


def tokenize_title(title: str) -> list[str]:
    """Split a title on whitespace into lowercase tokens longer than two characters."""
    return [token for token in title.strip().lower().split() if len(token) >= MIN_TOKEN_LENGTH]


def tokens_related(left: str, right: str) -> bool:
    """Return True when either token is a substring of the other."""
    return left in right or right in left


def count_token_overlap(candidate: Sequence[str], other: Sequence[str]) -> int:
    """Count candidate tokens that relate to at least one token of ``other``.

    The relation is substring containment in either direction, so "pothole"
    overlaps with "potholes" and "st" never counts because it is filtered out
    during tokenization.
    """
    return sum(1 for token in candidate if any(tokens_related(token, o) for o in other))
