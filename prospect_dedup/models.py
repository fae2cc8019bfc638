"""Record and result types shared by the deduplication engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DUPLICATE = "duplicate"
POTENTIAL_DUPLICATE = "potential_duplicate"
DISTINCT = "distinct"

# Field precedence used for reasons and detail ordering
FIELD_ORDER = ("phone", "name", "domain", "address")

# Record attributes, with the camelCase aliases used by the caller/API layer
_RECORD_KEYS: dict[str, tuple[str, ...]] = {
    "record_id": ("record_id", "id"),
    "business_name": ("business_name", "businessName", "name"),
    "phone": ("phone",),
    "address": ("address", "street_address", "streetAddress"),
    "city": ("city",),
    "state": ("state",),
    "postal_code": ("postal_code", "postalCode", "zip"),
    "website": ("website",),
    "email": ("email",),
    "notes": ("notes",),
}

# Fields Merge may fill on the kept record, in record order
MERGEABLE_FIELDS = (
    "business_name",
    "phone",
    "address",
    "city",
    "state",
    "postal_code",
    "website",
    "email",
)


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CandidateRecord:
    """A business-contact record as supplied by the record store or caller."""

    business_name: str
    record_id: Any = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    website: str | None = None
    email: str | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CandidateRecord:
        """Build a record from snake_case or camelCase keys; unknown keys are ignored."""
        values: dict[str, Any] = {}
        for attr, aliases in _RECORD_KEYS.items():
            for key in aliases:
                if key in d and d[key] is not None:
                    values[attr] = d[key]
                    break
        values["business_name"] = str(values.get("business_name") or "")
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {attr: getattr(self, attr) for attr in _RECORD_KEYS}

    @property
    def label(self) -> str:
        if self.record_id is None:
            return self.business_name
        return f"{self.business_name} (ID: {self.record_id})"


@dataclass(frozen=True)
class NormalizedAddress:
    """Canonical address split into street (primary) and locality (secondary)."""

    primary: str = ""
    secondary: str = ""
    postal_code: str = ""


@dataclass(frozen=True)
class NormalizedRecord:
    """Canonical forms of one record, computed once and reused across comparisons."""

    record: CandidateRecord
    name: str
    name_tokens: frozenset[str]
    phone: str
    address: NormalizedAddress
    domain: str


# ---------------------------------------------------------------------------
# Comparison results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldMatchDetail:
    """Outcome of one field matcher for one record pair."""

    field: str
    similarity: float
    exact: bool
    present: bool
    value_a: str
    value_b: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "similarity": self.similarity,
            "exact": self.exact,
            "present": self.present,
            "value_a": self.value_a,
            "value_b": self.value_b,
        }


@dataclass(frozen=True)
class MatchResult:
    """Scored and classified comparison of two records."""

    score: float
    classification: str  # "duplicate" | "potential_duplicate" | "distinct"
    reasons: list[str]
    details: dict[str, FieldMatchDetail]
    escalated: bool = False

    @property
    def is_duplicate(self) -> bool:
        return self.classification == DUPLICATE

    @property
    def is_match(self) -> bool:
        return self.classification != DISTINCT

    @property
    def fields_compared(self) -> list[str]:
        return [f for f in FIELD_ORDER if f in self.details and self.details[f].present]

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "classification": self.classification,
            "reasons": list(self.reasons),
            "escalated": self.escalated,
            "details": {name: d.to_dict() for name, d in self.details.items()},
        }


@dataclass(frozen=True)
class ScoredPair:
    record_a: CandidateRecord
    record_b: CandidateRecord
    result: MatchResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_a": self.record_a.to_dict(),
            "record_b": self.record_b.to_dict(),
            **self.result.to_dict(),
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """Two or more records linked directly or transitively."""

    records: tuple[CandidateRecord, ...]
    pair_count: int
    max_score: float

    @property
    def record_ids(self) -> list[Any]:
        return [r.record_id for r in self.records]

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_ids": self.record_ids,
            "records": [r.to_dict() for r in self.records],
            "pair_count": self.pair_count,
            "max_score": self.max_score,
        }


@dataclass(frozen=True)
class DuplicateMatch:
    record: CandidateRecord
    result: MatchResult

    @property
    def score(self) -> float:
        return self.result.score


@dataclass
class DuplicateCheckResult:
    """Result of checking one new record against an existing set."""

    is_duplicate: bool
    is_potential_duplicate: bool
    matches: list[DuplicateMatch]
    highest_score: float
    candidates_checked: int
    elapsed_ms: float = 0.0

    @property
    def best(self) -> MatchResult | None:
        return self.matches[0].result if self.matches else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_duplicate": self.is_duplicate,
            "is_potential_duplicate": self.is_potential_duplicate,
            "highest_score": self.highest_score,
            "candidates_checked": self.candidates_checked,
            "elapsed_ms": self.elapsed_ms,
            "matches": [
                {"record": m.record.to_dict(), **m.result.to_dict()}
                for m in self.matches
            ],
        }


@dataclass
class ScanReport:
    """Pairs and groups found by a full-collection scan."""

    pairs: list[ScoredPair]
    groups: list[DuplicateGroup]
    total_records: int
    comparisons: int
    blocking: str | None = None
    elapsed_ms: float = 0.0

    def summary(self) -> dict[str, Any]:
        return {
            "total_records": self.total_records,
            "comparisons": self.comparisons,
            "blocking": self.blocking,
            "duplicate_pairs": sum(1 for p in self.pairs if p.result.is_duplicate),
            "potential_duplicate_pairs": sum(1 for p in self.pairs if not p.result.is_duplicate),
            "duplicate_groups": len(self.groups),
            "records_in_groups": sum(len(g) for g in self.groups),
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass
class MergeOutcome:
    """Result of folding merge-away records into a kept record."""

    record: CandidateRecord
    fields_filled: list[str] = field(default_factory=list)
    merged_ids: list[Any] = field(default_factory=list)
    note: str = ""
