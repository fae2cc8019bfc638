#!/usr/bin/env python3
"""
Prospect Dedup: Postal Address Matching

Canonicalizes street addresses (abbreviation expansion, unit stripping) and
scores them on the street segment first, with city/state/postal as a
secondary signal. Distinct postal codes cap the score, since two different
ZIP codes almost always mean two different physical locations.

Dependencies:
    pip install rapidfuzz
"""

from __future__ import annotations

import re

from ..models import FieldMatchDetail, NormalizedAddress
from .name_similarity import levenshtein_similarity


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PRIMARY_WEIGHT = 0.75
SECONDARY_WEIGHT = 0.25

# Ceiling applied when both postal codes are present and differ
POSTAL_MISMATCH_CAP = 0.30

STREET_TYPES: dict[str, str] = {
    "st": "street",
    "str": "street",
    "ave": "avenue",
    "av": "avenue",
    "blvd": "boulevard",
    "rd": "road",
    "dr": "drive",
    "ln": "lane",
    "ct": "court",
    "pl": "place",
    "cir": "circle",
    "hwy": "highway",
    "pkwy": "parkway",
    "pky": "parkway",
    "sq": "square",
    "ter": "terrace",
    "trl": "trail",
    "tpke": "turnpike",
    "expy": "expressway",
    "fwy": "freeway",
    "plz": "plaza",
    "aly": "alley",
    "cv": "cove",
    "xing": "crossing",
}

DIRECTIONALS: dict[str, str] = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "ne": "northeast",
    "nw": "northwest",
    "se": "southeast",
    "sw": "southwest",
}

UNIT_DESIGNATORS: dict[str, str] = {
    "ste": "suite",
    "apt": "apartment",
    "fl": "floor",
    "bldg": "building",
    "rm": "room",
    "unit": "unit",
    "suite": "suite",
    "apartment": "apartment",
    "floor": "floor",
    "building": "building",
    "room": "room",
}

_ABBREVIATIONS = {**STREET_TYPES, **DIRECTIONALS, **UNIT_DESIGNATORS}

_UNIT_WORDS = frozenset(UNIT_DESIGNATORS.values())

_NON_ALNUM = re.compile(r"[^a-z0-9#\s]")
_MULTI_SPACE = re.compile(r"\s+")
_POSTAL_US = re.compile(r"^(\d{5})(?:-?\d{4})?$")
_TRAILING_ZIP = re.compile(r"\b(\d{5})(?:-\d{4})?\s*$")


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


def _clean(text: str | None) -> str:
    if not text:
        return ""
    text = str(text).lower().replace(".", "")
    text = _NON_ALNUM.sub(" ", text)
    return _MULTI_SPACE.sub(" ", text).strip()


def normalize_postal_code(postal: str | None) -> str:
    """US ZIP / ZIP+4 -> 5 digits; other formats lowercased without spaces."""
    if not postal:
        return ""
    text = str(postal).strip().lower().replace(" ", "")
    m = _POSTAL_US.match(text)
    if m:
        return m.group(1)
    return re.sub(r"[^a-z0-9]", "", text)


def normalize_street(street: str | None) -> str:
    """
    Canonical street segment: abbreviations expanded, unit designators and
    their values dropped ("100 N Main St., Ste 200" -> "100 north main street").
    """
    tokens = _clean(street).split()
    out: list[str] = []
    skip_next = False
    for token in tokens:
        if skip_next:
            skip_next = False
            continue
        if token.startswith("#"):
            # "#12" or a lone "#" followed by the unit number
            skip_next = token == "#"
            continue
        expanded = _ABBREVIATIONS.get(token, token)
        if expanded in _UNIT_WORDS:
            skip_next = True
            continue
        out.append(expanded)
    return " ".join(out)


def normalize_address(
    street: str | None,
    city: str | None = None,
    state: str | None = None,
    postal_code: str | None = None,
) -> NormalizedAddress:
    """
    Split an address into a primary (street number + name) and a secondary
    (city / state / postal) segment.

    When the street field holds a full one-line address, everything after its
    first comma is treated as locality text. A trailing ZIP in that text is
    used as the postal code if none was given explicitly.
    """
    street_text = str(street) if street else ""
    extra = ""
    if "," in street_text:
        street_text, extra = street_text.split(",", 1)

    postal = normalize_postal_code(postal_code)
    if extra:
        extra = extra.strip()
        m = _TRAILING_ZIP.search(extra)
        if m:
            postal = postal or m.group(1)
            extra = extra[: m.start()]

    primary = normalize_street(street_text)

    locality = [_clean(extra), _clean(city), _clean(state)]
    if postal:
        locality.append(postal)
    secondary = " ".join(part for part in locality if part)

    return NormalizedAddress(primary=primary, secondary=secondary, postal_code=postal)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def postal_codes_conflict(addr_a: NormalizedAddress, addr_b: NormalizedAddress) -> bool:
    """True when both addresses carry a postal code and the codes differ."""
    return bool(addr_a.postal_code) and bool(addr_b.postal_code) and addr_a.postal_code != addr_b.postal_code


def compare_addresses(addr_a: NormalizedAddress, addr_b: NormalizedAddress) -> FieldMatchDetail:
    """
    Compare two normalized addresses.

    Present only when both sides have a street segment. The street ratio is
    weighted above the locality ratio; differing postal codes cap the result
    at POSTAL_MISMATCH_CAP.
    """
    value_a = " | ".join(p for p in (addr_a.primary, addr_a.secondary) if p)
    value_b = " | ".join(p for p in (addr_b.primary, addr_b.secondary) if p)

    if not addr_a.primary or not addr_b.primary:
        return FieldMatchDetail("address", 0.0, False, False, value_a, value_b)

    primary = levenshtein_similarity(addr_a.primary, addr_b.primary)
    if addr_a.secondary and addr_b.secondary:
        secondary = levenshtein_similarity(addr_a.secondary, addr_b.secondary)
        similarity = PRIMARY_WEIGHT * primary + SECONDARY_WEIGHT * secondary
    else:
        similarity = primary

    postal_conflict = postal_codes_conflict(addr_a, addr_b)
    if postal_conflict:
        similarity = min(similarity, POSTAL_MISMATCH_CAP)

    exact = (
        addr_a.primary == addr_b.primary
        and addr_a.secondary == addr_b.secondary
        and not postal_conflict
    )
    return FieldMatchDetail("address", round(similarity, 4), exact, True, value_a, value_b)
