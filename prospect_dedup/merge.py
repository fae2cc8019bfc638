"""
Merge duplicate records into a kept record.

Empty fields on the kept record are filled from the merge-away records
(first non-empty value wins, in the order the ids were supplied), a
provenance note is appended, and the merged records are deleted from the
store. No matching is performed here; the caller picked the records.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Sequence

from .errors import MissingIdentifierError, RecordNotFoundError
from .models import MERGEABLE_FIELDS, CandidateRecord, MergeOutcome
from .record_store import RecordStore

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def fill_from(
    kept: CandidateRecord,
    others: Sequence[CandidateRecord],
) -> tuple[CandidateRecord, list[str]]:
    """
    Fill the empty fields of ``kept`` from ``others``.

    Returns (updated_record, fields_filled). ``kept`` itself is not modified.
    """
    updates: dict[str, Any] = {}
    for field_name in MERGEABLE_FIELDS:
        if not _is_empty(getattr(kept, field_name)):
            continue
        for other in others:
            value = getattr(other, field_name)
            if not _is_empty(value):
                updates[field_name] = value
                break
    if not updates:
        return kept, []
    return replace(kept, **updates), list(updates)


def provenance_note(merged: Sequence[CandidateRecord], fields_filled: Sequence[str]) -> str:
    lines = [f"Merged from: {r.business_name} (ID: {r.record_id})" for r in merged]
    if fields_filled:
        lines.append(f"Fields filled by merge: {', '.join(fields_filled)}")
    return "\n".join(lines)


def merge_records(
    keep_id: Any,
    merge_ids: Sequence[Any],
    store: RecordStore,
) -> MergeOutcome:
    """
    Fold ``merge_ids`` into the record ``keep_id`` and delete them from the store.

    Ids equal to ``keep_id`` and ids missing from the store are skipped.

    Raises:
        MissingIdentifierError: ``keep_id`` is None.
        RecordNotFoundError: ``keep_id`` is not in the store.
    """
    if keep_id is None:
        raise MissingIdentifierError("merge requires the id of the record to keep")

    kept = store.get(keep_id)
    if kept is None:
        raise RecordNotFoundError(f"record to keep not found: {keep_id!r}")

    merged: list[CandidateRecord] = []
    seen: set[Any] = set()
    for mid in merge_ids:
        if mid is None or mid == keep_id or mid in seen:
            continue
        seen.add(mid)
        other = store.get(mid)
        if other is None:
            logger.warning("Merge candidate %r not found; skipping", mid)
            continue
        merged.append(other)

    if not merged:
        logger.info("Nothing to merge into %r", keep_id)
        return MergeOutcome(record=kept)

    updated, fields_filled = fill_from(kept, merged)
    note = provenance_note(merged, fields_filled)
    notes = "\n".join(part for part in (updated.notes, note) if part)
    updated = replace(updated, notes=notes)

    store.update(updated)
    for other in merged:
        store.delete(other.record_id)

    logger.info(
        "Merged %d records into %r (filled: %s)",
        len(merged),
        keep_id,
        ", ".join(fields_filled) or "none",
    )
    return MergeOutcome(
        record=updated,
        fields_filled=fields_filled,
        merged_ids=[r.record_id for r in merged],
        note=note,
    )
