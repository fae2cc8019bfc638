#!/usr/bin/env python3
"""
Prospect Dedup: Fuzzy Business-Name Matching

Computes similarity between business names using a normalised Levenshtein
ratio and a token-set overlap ratio, after stripping punctuation and the
legal-entity suffixes that carry no identity signal.

Dependencies:
    pip install rapidfuzz
"""

from __future__ import annotations

import re
import unicodedata

from rapidfuzz.distance import Levenshtein

from ..models import FieldMatchDetail


# ---------------------------------------------------------------------------
# Business naming noise
# ---------------------------------------------------------------------------

# Legal forms stripped from the end of a name ("Joe's Pizza LLC" -> "joes pizza")
LEGAL_SUFFIXES = frozenset({
    "llc",
    "llp",
    "pllc",
    "lp",
    "inc",
    "incorporated",
    "corp",
    "corporation",
    "co",
    "company",
    "ltd",
    "limited",
    "plc",
    "pc",
})

_APOSTROPHES = re.compile(r"['’`]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_MULTI_SPACE = re.compile(r"\s+")


def normalize_name(name: str | None) -> str:
    """
    Normalize a business name for comparison.

    Steps:
        1. Unicode NFKD normalisation (strip accents)
        2. Lowercase
        3. Drop apostrophes, turn other punctuation into spaces
        4. Collapse whitespace and trim
        5. Strip trailing legal-entity suffixes, repeatedly

    Returns "" for absent or punctuation-only input.
    """
    if not name:
        return ""

    text = unicodedata.normalize("NFKD", str(name))
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = text.lower()

    text = _APOSTROPHES.sub("", text)
    text = _NON_ALNUM.sub(" ", text)
    text = _MULTI_SPACE.sub(" ", text).strip()

    tokens = text.split()
    while len(tokens) > 1 and tokens[-1] in LEGAL_SUFFIXES:
        tokens.pop()

    return " ".join(tokens)


def name_tokens(normalized: str) -> frozenset[str]:
    """Split a normalized name into an order-insensitive word set."""
    return frozenset(normalized.split())


# ---------------------------------------------------------------------------
# Scoring functions
# ---------------------------------------------------------------------------


def levenshtein_similarity(a: str, b: str) -> float:
    """
    Normalised Levenshtein similarity between two strings.

    Returns a value in [0.0, 1.0] where 1.0 means identical.
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return Levenshtein.normalized_similarity(a, b)


def token_set_similarity(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> float:
    """
    Dice overlap of two word sets.

    Handles reordered words ("joes pizza" vs "pizza joes" -> 1.0) while a
    strict subset still loses credit ("pizza" vs "joes pizza" -> 0.67).
    """
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    shared = len(tokens_a & tokens_b)
    return 2.0 * shared / (len(tokens_a) + len(tokens_b))


def compare_names(
    norm_a: str,
    norm_b: str,
    *,
    tokens_a: frozenset[str] | None = None,
    tokens_b: frozenset[str] | None = None,
    min_similarity: float = 0.0,
) -> FieldMatchDetail:
    """
    Compare two normalized business names.

    Similarity is the larger of the edit-distance ratio and the token-set
    overlap, floored to 0.0 when it falls below ``min_similarity``.
    """
    if not norm_a or not norm_b:
        return FieldMatchDetail("name", 0.0, False, False, norm_a, norm_b)

    if tokens_a is None:
        tokens_a = name_tokens(norm_a)
    if tokens_b is None:
        tokens_b = name_tokens(norm_b)

    exact = norm_a == norm_b
    if exact:
        similarity = 1.0
    else:
        similarity = max(
            levenshtein_similarity(norm_a, norm_b),
            token_set_similarity(tokens_a, tokens_b),
        )
        if similarity < min_similarity:
            similarity = 0.0

    return FieldMatchDetail("name", round(similarity, 4), exact, True, norm_a, norm_b)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def compute_name_similarity(name_a: str | None, name_b: str | None, min_similarity: float = 0.0) -> float:
    """Normalize two raw names and return their similarity (0.0-1.0)."""
    return compare_names(
        normalize_name(name_a),
        normalize_name(name_b),
        min_similarity=min_similarity,
    ).similarity
