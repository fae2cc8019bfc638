#!/usr/bin/env python3
"""
Prospect Dedup: Phone and Domain Matching

Phone numbers and website/email domains are compared by exact equality of
their canonical forms. Neither has a meaningful partial distance, so both
matchers score 1.0 or 0.0 and report absence when either side is missing.

No external libraries required.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from ..models import FieldMatchDetail


# ---------------------------------------------------------------------------
# Phone normalisation
# ---------------------------------------------------------------------------

PHONE_INVALID = "invalid"

_PHONE_STRIP = re.compile(r"[^0-9]")
_PHONE_EXTENSION = re.compile(r"\s*(?:ext\.?|extension|x|#)\s*\d+\s*$", re.IGNORECASE)


def normalize_phone(phone: str | int | None) -> str:
    """
    Normalize a phone number to its last 10 digits.

    Longer inputs (country or trunk prefixes such as "+1" or "001") keep
    their trailing 10 digits; fewer than 10 digits is invalid.

    Examples:
        "(555) 123-4567"        -> "5551234567"
        "+1 555 123 4567"       -> "5551234567"
        "001 555 123 4567"      -> "5551234567"
        "555-123-4567 ext. 89"  -> "5551234567"
        "123-45"                -> "invalid"
        None                    -> ""
    """
    if phone is None:
        return ""
    text = _PHONE_EXTENSION.sub("", str(phone))
    digits = _PHONE_STRIP.sub("", text)
    if not digits:
        return ""
    if len(digits) < 10:
        return PHONE_INVALID
    return digits[-10:]


def phone_is_usable(normalized: str) -> bool:
    return bool(normalized) and normalized != PHONE_INVALID


def compare_phones(norm_a: str, norm_b: str) -> FieldMatchDetail:
    """
    Compare two canonical phone numbers.

    Returns a detail with similarity 1.0 on exact match and 0.0 otherwise;
    ``present`` is False when either side is empty or invalid.
    """
    if not phone_is_usable(norm_a) or not phone_is_usable(norm_b):
        return FieldMatchDetail("phone", 0.0, False, False, norm_a, norm_b)
    exact = norm_a == norm_b
    return FieldMatchDetail("phone", 1.0 if exact else 0.0, exact, True, norm_a, norm_b)


# ---------------------------------------------------------------------------
# Domain extraction
# ---------------------------------------------------------------------------

# Second-level labels under which registrations happen one level deeper
_PUBLIC_SECOND_LEVEL = frozenset({
    "co", "com", "net", "org", "gov", "edu", "ac", "ltd", "plc", "nhs",
})

_EMAIL_DOMAIN = re.compile(r"@([^@\s>]+)\s*>?\s*$")
_HOST_LABEL = re.compile(r"^[a-z0-9-]+$")


def registrable_domain(host: str) -> str:
    """
    Reduce a host name to its registrable domain.

    "shop.joespizza.com" -> "joespizza.com"; "www.joes.co.uk" -> "joes.co.uk".
    Returns "" when the host is not a plausible domain name.
    """
    host = host.strip().strip(".").lower()
    if host.startswith("www."):
        host = host[4:]
    labels = [label for label in host.split(".") if label]
    if len(labels) < 2 or not all(_HOST_LABEL.match(label) for label in labels):
        return ""
    if labels[-1].isdigit():
        # bare IPv4 address
        return ""
    keep = 2
    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _PUBLIC_SECOND_LEVEL:
        keep = 3
    return ".".join(labels[-keep:])


def domain_from_url(url: str | None) -> str:
    """Extract the registrable domain from a website URL; "" when malformed."""
    if not url or not str(url).strip():
        return ""
    text = str(url).strip().lower()
    if "://" not in text:
        text = "http://" + text.lstrip("/")
    try:
        host = urlsplit(text).hostname or ""
    except ValueError:
        return ""
    return registrable_domain(host)


def domain_from_email(email: str | None) -> str:
    """Extract the registrable domain after the "@" of an address."""
    if not email:
        return ""
    match = _EMAIL_DOMAIN.search(str(email).strip().lower())
    if not match:
        return ""
    return registrable_domain(match.group(1))


def normalize_domain(website: str | None, email: str | None) -> str:
    """Canonical domain for a record: website first, then email."""
    return domain_from_url(website) or domain_from_email(email)


def compare_domains(norm_a: str, norm_b: str) -> FieldMatchDetail:
    """
    Compare two canonical domains by exact equality.

    When either side has no domain the similarity is 0.0 and the detail is
    marked not present, so the domain weight drops out of the blend.
    """
    if not norm_a or not norm_b:
        return FieldMatchDetail("domain", 0.0, False, False, norm_a, norm_b)
    exact = norm_a == norm_b
    return FieldMatchDetail("domain", 1.0 if exact else 0.0, exact, True, norm_a, norm_b)
