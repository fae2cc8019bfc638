#!/usr/bin/env python3
"""
Prospect Dedup: Composite Duplicate Scorer

Combines name, phone, address and domain similarity into a single
confidence score (0.0-1.0) and a classification of duplicate,
potential_duplicate or distinct.

When a field is missing on either record, its weight is dropped from both
the numerator and the denominator rather than penalizing (or rewarding)
the pair.

Dependencies:
    pip install rapidfuzz pyyaml
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..errors import ConfigError
from ..models import (
    DISTINCT,
    DUPLICATE,
    FIELD_ORDER,
    POTENTIAL_DUPLICATE,
    CandidateRecord,
    FieldMatchDetail,
    MatchResult,
    NormalizedRecord,
)
from .address_similarity import compare_addresses, normalize_address, postal_codes_conflict
from .contact_matching import compare_domains, compare_phones, normalize_domain, normalize_phone
from .name_similarity import compare_names, name_tokens, normalize_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Attribute name -> camelCase name used by the caller/API layer
_CAMEL_KEYS: dict[str, str] = {
    "duplicate_threshold": "duplicateThreshold",
    "potential_duplicate_threshold": "potentialDuplicateThreshold",
    "name_weight": "nameWeight",
    "phone_weight": "phoneWeight",
    "address_weight": "addressWeight",
    "domain_weight": "domainWeight",
    "min_name_similarity": "minNameSimilarity",
    "phone_match_is_duplicate": "phoneMatchIsDuplicate",
}
_KEY_ALIASES: dict[str, str] = {
    **{k: k for k in _CAMEL_KEYS},
    **{v: k for k, v in _CAMEL_KEYS.items()},
}
_BOOL_KEYS = frozenset({"phone_match_is_duplicate"})
_WEIGHT_KEYS = ("name_weight", "phone_weight", "address_weight", "domain_weight")

# Similarity at/above which a fuzzy field earns its own reason
NOTABLE_NAME = 0.80
NOTABLE_ADDRESS = 0.80


@dataclass(frozen=True)
class EngineConfig:
    """Weights and thresholds for one scoring run. Immutable; derive with with_updates()."""

    duplicate_threshold: float = 0.75
    potential_duplicate_threshold: float = 0.60
    name_weight: float = 0.40
    phone_weight: float = 0.30
    address_weight: float = 0.20
    domain_weight: float = 0.10
    min_name_similarity: float = 0.50
    phone_match_is_duplicate: bool = True

    def __post_init__(self) -> None:
        for key in _CAMEL_KEYS:
            value = getattr(self, key)
            if key in _BOOL_KEYS:
                if not isinstance(value, bool):
                    raise ConfigError(f"{key} must be a boolean (got {value!r})")
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{key} must be a number (got {value!r})")
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{key} must be between 0 and 1 (got {value})")
        if self.duplicate_threshold < self.potential_duplicate_threshold:
            raise ConfigError(
                "duplicate_threshold must be >= potential_duplicate_threshold "
                f"(got {self.duplicate_threshold} < {self.potential_duplicate_threshold})"
            )
        if sum(self.weights.values()) <= 0:
            raise ConfigError("at least one field weight must be > 0")

    @property
    def weights(self) -> dict[str, float]:
        return {
            "name": self.name_weight,
            "phone": self.phone_weight,
            "address": self.address_weight,
            "domain": self.domain_weight,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> EngineConfig:
        """Strict constructor: every recognized key is validated, unknown keys are ignored."""
        values: dict[str, Any] = {}
        for key, value in d.items():
            attr = _KEY_ALIASES.get(key)
            if attr is not None:
                values[attr] = value
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """
        Load configuration from a YAML rules file.

        Accepts either a flat mapping of config keys or the sectioned layout
        of config/dedup_rules.yaml (``thresholds``, ``weights``, ``rules``).
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read rules file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level")

        thresholds = raw.get("thresholds", {}) or {}
        weights = raw.get("weights", {}) or {}
        rules = raw.get("rules", {}) or {}

        flat: dict[str, Any] = {k: v for k, v in raw.items() if k in _KEY_ALIASES}
        for name in ("duplicate", "potential_duplicate"):
            if name in thresholds:
                flat[f"{name}_threshold"] = thresholds[name]
        for name in ("name", "phone", "address", "domain"):
            if name in weights:
                flat[f"{name}_weight"] = weights[name]
        if "min_name_similarity" in rules:
            flat["min_name_similarity"] = rules["min_name_similarity"]
        if "phone_match_is_duplicate" in rules:
            flat["phone_match_is_duplicate"] = rules["phone_match_is_duplicate"]

        return cls.from_dict(flat)

    @classmethod
    def default_rules_path(cls) -> Path:
        return Path(__file__).resolve().parent.parent / "config" / "dedup_rules.yaml"

    def with_updates(self, partial: Mapping[str, Any]) -> tuple[EngineConfig, dict[str, Any]]:
        """
        Apply a partial update the way the admin API does.

        Unrecognized keys and values of the wrong type or outside [0, 1] are
        skipped. The merged config is validated as a whole, so an update
        that breaks threshold ordering raises ConfigError and leaves this
        instance untouched.

        Returns (new_config, applied) where ``applied`` maps attribute names
        to the values that were taken.
        """
        applied: dict[str, Any] = {}
        for key, value in partial.items():
            attr = _KEY_ALIASES.get(key)
            if attr is None:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            if attr in _BOOL_KEYS:
                if isinstance(value, bool):
                    applied[attr] = value
                else:
                    logger.warning("Ignoring non-boolean value for %s: %r", attr, value)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                logger.warning("Ignoring non-numeric value for %s: %r", attr, value)
                continue
            if not 0.0 <= value <= 1.0:
                logger.warning("Ignoring out-of-range value for %s: %r", attr, value)
                continue
            applied[attr] = float(value)

        if not applied:
            return self, applied
        return replace(self, **applied), applied

    def to_dict(self) -> dict[str, Any]:
        """Config keyed by the caller-facing camelCase names."""
        return {_CAMEL_KEYS[k]: v for k, v in asdict(self).items()}


# ---------------------------------------------------------------------------
# Record normalisation
# ---------------------------------------------------------------------------


def normalize_record(record: CandidateRecord) -> NormalizedRecord:
    """Canonicalize every comparable field of a record once."""
    name = normalize_name(record.business_name)
    return NormalizedRecord(
        record=record,
        name=name,
        name_tokens=name_tokens(name),
        phone=normalize_phone(record.phone),
        address=normalize_address(record.address, record.city, record.state, record.postal_code),
        domain=normalize_domain(record.website, record.email),
    )


# ---------------------------------------------------------------------------
# Composite scorer
# ---------------------------------------------------------------------------


def classify(score: float, config: EngineConfig) -> str:
    """Map a blended score to a classification."""
    if score >= config.duplicate_threshold:
        return DUPLICATE
    if score >= config.potential_duplicate_threshold:
        return POTENTIAL_DUPLICATE
    return DISTINCT


def _field_reason(detail: FieldMatchDetail) -> str | None:
    if not detail.present:
        return None
    if detail.field == "phone" and detail.exact:
        return "phone numbers match exactly"
    if detail.field == "domain" and detail.exact:
        return f"website/email domains match ({detail.value_a})"
    if detail.field == "name":
        if detail.exact:
            return "business names match exactly"
        if detail.similarity >= NOTABLE_NAME:
            return f"business names are {detail.similarity:.0%} similar"
    if detail.field == "address":
        if detail.exact:
            return "addresses match exactly"
        if detail.similarity >= NOTABLE_ADDRESS:
            return f"addresses are {detail.similarity:.0%} similar"
    return None


def build_reasons(
    details: dict[str, FieldMatchDetail],
    score: float,
    classification: str,
    escalated: bool,
    postal_capped: tuple[str, str] | None = None,
) -> list[str]:
    """
    Human-readable reasons in field precedence order (phone, name, domain,
    address). A non-distinct result always carries at least one reason.

    ``postal_capped`` holds the two postal codes when a postal conflict kept
    the pair out of the duplicate class.
    """
    reasons: list[str] = []
    for name in FIELD_ORDER:
        reason = _field_reason(details[name])
        if reason:
            reasons.append(reason)

    if classification != DISTINCT and not reasons:
        compared = [name for name in FIELD_ORDER if details[name].present]
        reasons.append(f"combined similarity of {score:.0%} across {', '.join(compared)}")

    if postal_capped:
        reasons.append(f"postal codes differ ({postal_capped[0]} vs {postal_capped[1]})")

    if escalated:
        reasons.append("exact phone match treated as duplicate")

    return reasons


def compare_normalized(
    norm_a: NormalizedRecord,
    norm_b: NormalizedRecord,
    config: EngineConfig,
) -> MatchResult:
    """
    Score two pre-normalized records.

    Each field weight counts only when that field was present on both
    sides. Differing postal codes hold the pair at potential_duplicate at
    most. With ``phone_match_is_duplicate`` set, an exact phone match
    classifies the pair as duplicate whatever the blended score.
    """
    details = {
        "phone": compare_phones(norm_a.phone, norm_b.phone),
        "name": compare_names(
            norm_a.name,
            norm_b.name,
            tokens_a=norm_a.name_tokens,
            tokens_b=norm_b.name_tokens,
            min_similarity=config.min_name_similarity,
        ),
        "domain": compare_domains(norm_a.domain, norm_b.domain),
        "address": compare_addresses(norm_a.address, norm_b.address),
    }

    weights = config.weights
    available_weight = sum(weights[k] for k, d in details.items() if d.present)
    if available_weight == 0:
        raw_score = 0.0
    else:
        raw_score = sum(
            weights[k] * d.similarity for k, d in details.items() if d.present
        ) / available_weight
    raw_score = min(1.0, max(0.0, raw_score))

    classification = classify(raw_score, config)
    postal_capped = None
    if classification == DUPLICATE and postal_codes_conflict(norm_a.address, norm_b.address):
        classification = POTENTIAL_DUPLICATE
        postal_capped = (norm_a.address.postal_code, norm_b.address.postal_code)

    escalated = False
    if config.phone_match_is_duplicate and details["phone"].exact and classification != DUPLICATE:
        classification = DUPLICATE
        escalated = True

    score = round(raw_score, 4)
    return MatchResult(
        score=score,
        classification=classification,
        reasons=build_reasons(details, score, classification, escalated, postal_capped),
        details=details,
        escalated=escalated,
    )


def score(
    record_a: CandidateRecord,
    record_b: CandidateRecord,
    config: EngineConfig | None = None,
) -> MatchResult:
    """Compare two raw records. Uses default weights and thresholds if no config is given."""
    if config is None:
        config = EngineConfig()
    return compare_normalized(normalize_record(record_a), normalize_record(record_b), config)


# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------


def score_candidate_pairs(
    pairs: list[tuple[CandidateRecord, CandidateRecord]],
    config: EngineConfig | None = None,
) -> list[MatchResult]:
    """
    Score a list of (record_a, record_b) candidate pairs.

    Returns a list of MatchResult objects sorted by score descending.
    """
    results = [score(a, b, config) for a, b in pairs]
    results.sort(key=lambda r: r.score, reverse=True)
    return results
