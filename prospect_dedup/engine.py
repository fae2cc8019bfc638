"""
Prospect Dedup: Engine

The caller-facing operations: single-record duplicate check, batch check,
full-collection scan, merge, and config read/update.

An engine is constructed explicitly and injected where it is needed; there
is no process-wide instance. The current EngineConfig is an immutable value
swapped under a lock, so every operation reads one consistent snapshot even
while an administrator updates the config concurrently.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Mapping, Sequence

from .algorithms.clustering import group
from .algorithms.composite_scorer import EngineConfig, compare_normalized, normalize_record
from .algorithms.pairwise_scan import scan_normalized
from .merge import merge_records
from .models import (
    DUPLICATE,
    CandidateRecord,
    DuplicateCheckResult,
    DuplicateMatch,
    MatchResult,
    MergeOutcome,
    NormalizedRecord,
    ScanReport,
)
from .record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10


def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000.0, 2)


class DuplicateEngine:
    """Duplicate detection over business-contact records."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config if config is not None else EngineConfig()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        """The current config snapshot."""
        with self._lock:
            return self._config

    def get_config(self) -> dict[str, Any]:
        return self.config.to_dict()

    def update_config(self, partial: Mapping[str, Any]) -> dict[str, Any]:
        """
        Apply a partial config update atomically.

        Unknown keys and out-of-range or wrongly typed values are ignored.

        Returns:
            The applied updates keyed by camelCase name (empty if nothing
            was recognized).

        Raises:
            ConfigError: the result would break threshold ordering or zero
                every weight. The previous config stays in place.
        """
        with self._lock:
            new_config, applied = self._config.with_updates(partial)
            self._config = new_config
        if applied:
            logger.info("Duplicate detection config updated: %s", applied)
        return {k: v for k, v in new_config.to_dict().items() if _snake(k) in applied}

    # ------------------------------------------------------------------
    # Pair scoring
    # ------------------------------------------------------------------

    def score(self, record_a: CandidateRecord, record_b: CandidateRecord) -> MatchResult:
        return compare_normalized(normalize_record(record_a), normalize_record(record_b), self.config)

    # ------------------------------------------------------------------
    # CheckDuplicate
    # ------------------------------------------------------------------

    def check_duplicate(
        self,
        new_record: CandidateRecord,
        existing_records: Sequence[CandidateRecord],
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> DuplicateCheckResult:
        """
        Check one record against a known set before inserting it.

        Existing records carrying the same id as ``new_record`` are skipped.
        Matches are ordered duplicates first, then by score, and capped at
        ``max_results``.
        """
        existing = [normalize_record(r) for r in existing_records]
        return self._check_normalized(new_record, existing, self.config, max_results)

    def check_batch(
        self,
        new_records: Sequence[CandidateRecord],
        existing_records: Sequence[CandidateRecord],
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> dict[Any, DuplicateCheckResult]:
        """
        Check several new records against the same existing set.

        The existing set is normalized once. Results are keyed by record id,
        or by business name for records without one.
        """
        config = self.config
        existing = [normalize_record(r) for r in existing_records]
        results: dict[Any, DuplicateCheckResult] = {}
        for record in new_records:
            key = record.record_id if record.record_id is not None else record.business_name
            results[key] = self._check_normalized(record, existing, config, max_results)
        return results

    def _check_normalized(
        self,
        new_record: CandidateRecord,
        existing: Sequence[NormalizedRecord],
        config: EngineConfig,
        max_results: int,
    ) -> DuplicateCheckResult:
        t0 = time.perf_counter()
        candidate = normalize_record(new_record)

        matches: list[DuplicateMatch] = []
        for other in existing:
            if new_record.record_id is not None and other.record.record_id == new_record.record_id:
                continue
            result = compare_normalized(candidate, other, config)
            if result.is_match:
                matches.append(DuplicateMatch(other.record, result))

        matches.sort(key=lambda m: (m.result.classification == DUPLICATE, m.score), reverse=True)
        highest = max((m.score for m in matches), default=0.0)

        return DuplicateCheckResult(
            is_duplicate=any(m.result.is_duplicate for m in matches),
            is_potential_duplicate=bool(matches),
            matches=matches[:max_results],
            highest_score=highest,
            candidates_checked=len(existing),
            elapsed_ms=_elapsed_ms(t0),
        )

    # ------------------------------------------------------------------
    # ScanCollection
    # ------------------------------------------------------------------

    def scan_collection(
        self,
        records: Sequence[CandidateRecord],
        *,
        potential_threshold: float | None = None,
        blocking: str | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> ScanReport:
        """
        Sweep a whole collection for duplicate pairs and groups.

        ``potential_threshold`` overrides the potential-duplicate threshold
        for this scan only. ``blocking`` restricts comparisons to records
        sharing a blocking key (see algorithms.blocking); the default scans
        every pair.

        Raises:
            ConfigError: the threshold override is invalid.
            ScanCancelled: ``should_cancel`` returned True mid-scan.
        """
        config = self.config
        if potential_threshold is not None:
            config = replace(config, potential_duplicate_threshold=potential_threshold)

        t0 = time.perf_counter()
        logger.info("Scanning %d records (blocking: %s)", len(records), blocking or "none")

        normalized = [normalize_record(r) for r in records]
        pairs, comparisons = scan_normalized(
            normalized,
            config,
            blocking=blocking,
            should_cancel=should_cancel,
        )
        pairs.sort(key=lambda p: p.result.score, reverse=True)
        groups = group(pairs)

        report = ScanReport(
            pairs=pairs,
            groups=groups,
            total_records=len(records),
            comparisons=comparisons,
            blocking=blocking,
            elapsed_ms=_elapsed_ms(t0),
        )
        logger.info(
            "Scan complete: %d comparisons, %d pairs, %d groups in %.1f ms",
            comparisons,
            len(pairs),
            len(groups),
            report.elapsed_ms,
        )
        return report

    def scan_store(
        self,
        store: RecordStore,
        scope: str | None = None,
        **kwargs: Any,
    ) -> ScanReport:
        """Fetch one scope from the store and scan it."""
        return self.scan_collection(store.fetch_all(scope), **kwargs)

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge(self, keep_id: Any, merge_ids: Sequence[Any], store: RecordStore) -> MergeOutcome:
        return merge_records(keep_id, merge_ids, store)


def _snake(camel: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in camel)
