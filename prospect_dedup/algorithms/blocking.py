"""
Prospect Dedup: Blocking Strategies

Partitions normalized records into coarse blocks so the pairwise scan only
scores records that share a block. Blocking trades a little recall for a
large cut in comparisons; it is opt-in per scan and never the default.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable

from ..models import NormalizedRecord

DEFAULT_BLOCK = "default"

POSTAL_PREFIX_LENGTH = 3
NAME_PREFIX_LENGTH = 3


def postal_prefix_key(record: NormalizedRecord) -> str | None:
    """First three characters of the postal code (US ZIP3 area)."""
    postal = record.address.postal_code
    if len(postal) < POSTAL_PREFIX_LENGTH:
        return None
    return f"p_{postal[:POSTAL_PREFIX_LENGTH]}"


def name_prefix_key(record: NormalizedRecord) -> str | None:
    """First three letters of the normalized name, spaces removed."""
    compact = record.name.replace(" ", "")
    if not compact:
        return None
    return f"n_{compact[:NAME_PREFIX_LENGTH]}"


BLOCKING_STRATEGIES: dict[str, Callable[[NormalizedRecord], str | None]] = {
    "postal_prefix": postal_prefix_key,
    "name_prefix": name_prefix_key,
}


def build_blocks(
    records: list[NormalizedRecord],
    strategy: str | None,
) -> list[list[int]]:
    """
    Group record indices by blocking key.

    With no strategy every record lands in one block (exhaustive scan).
    Records whose key cannot be computed share the "default" block.
    Blocks keep first-seen order, and indices within a block stay ascending.

    Raises:
        ValueError: unknown strategy name.
    """
    if strategy is None:
        return [list(range(len(records)))]
    if strategy not in BLOCKING_STRATEGIES:
        raise ValueError(f"unknown blocking strategy {strategy!r}. Valid: {sorted(BLOCKING_STRATEGIES)}")

    key_fn = BLOCKING_STRATEGIES[strategy]
    blocks: dict[str, list[int]] = defaultdict(list)
    for idx, record in enumerate(records):
        blocks[key_fn(record) or DEFAULT_BLOCK].append(idx)
    return list(blocks.values())
