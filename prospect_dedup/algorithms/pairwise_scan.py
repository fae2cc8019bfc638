"""
Prospect Dedup: Pairwise Scanner

Scores every unordered pair of records once (within each block when a
blocking strategy is set) and keeps the pairs that are not distinct.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ..errors import ScanCancelled
from ..models import CandidateRecord, NormalizedRecord, ScoredPair
from .blocking import build_blocks
from .composite_scorer import EngineConfig, compare_normalized, normalize_record

logger = logging.getLogger(__name__)


def scan_normalized(
    normalized: Sequence[NormalizedRecord],
    config: EngineConfig,
    *,
    blocking: str | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> tuple[list[ScoredPair], int]:
    """
    Compare pre-normalized records pairwise.

    ``should_cancel`` is polled before each outer-loop iteration; when it
    returns True the scan stops with ScanCancelled.

    Returns (pairs, comparisons) where ``pairs`` holds the non-distinct
    results in scan order and ``comparisons`` counts every pair scored.
    """
    blocks = build_blocks(list(normalized), blocking)

    pairs: list[ScoredPair] = []
    comparisons = 0

    for block in blocks:
        for pos, i in enumerate(block):
            if should_cancel is not None and should_cancel():
                logger.info("Scan cancelled after %d comparisons", comparisons)
                raise ScanCancelled(f"scan cancelled after {comparisons} comparisons")
            left = normalized[i]
            for j in block[pos + 1:]:
                right = normalized[j]
                result = compare_normalized(left, right, config)
                comparisons += 1
                if result.is_match:
                    pairs.append(ScoredPair(left.record, right.record, result))

    return pairs, comparisons


def scan(
    records: Sequence[CandidateRecord],
    config: EngineConfig | None = None,
    *,
    blocking: str | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> list[ScoredPair]:
    """Normalize and scan a record collection; see scan_normalized()."""
    if config is None:
        config = EngineConfig()
    normalized = [normalize_record(r) for r in records]
    pairs, _ = scan_normalized(normalized, config, blocking=blocking, should_cancel=should_cancel)
    return pairs
