"""Prospect Dedup: duplicate detection for business-contact records."""

from .algorithms.clustering import group
from .algorithms.composite_scorer import EngineConfig, score
from .algorithms.pairwise_scan import scan
from .engine import DuplicateEngine
from .errors import (
    ConfigError,
    DedupError,
    MissingIdentifierError,
    RecordNotFoundError,
    RecordStoreError,
    ScanCancelled,
)
from .merge import merge_records
from .models import (
    DISTINCT,
    DUPLICATE,
    POTENTIAL_DUPLICATE,
    CandidateRecord,
    DuplicateCheckResult,
    DuplicateGroup,
    DuplicateMatch,
    FieldMatchDetail,
    MatchResult,
    MergeOutcome,
    ScanReport,
    ScoredPair,
)
from .record_store import InMemoryRecordStore, JsonRecordStore, RecordStore

__all__ = [
    "__version__",
    "DuplicateEngine",
    "EngineConfig",
    "score",
    "scan",
    "group",
    "merge_records",
    "CandidateRecord",
    "FieldMatchDetail",
    "MatchResult",
    "ScoredPair",
    "DuplicateGroup",
    "DuplicateMatch",
    "DuplicateCheckResult",
    "ScanReport",
    "MergeOutcome",
    "DUPLICATE",
    "POTENTIAL_DUPLICATE",
    "DISTINCT",
    "RecordStore",
    "InMemoryRecordStore",
    "JsonRecordStore",
    "DedupError",
    "ConfigError",
    "MissingIdentifierError",
    "RecordNotFoundError",
    "RecordStoreError",
    "ScanCancelled",
]

__version__ = "0.1.0"
