"""
Record store boundary consumed by the engine.

The engine only needs to fetch the records of a scope, look one up, persist
an updated record and delete by identifier. Two implementations ship here:
an in-memory store and a JSON-file store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .errors import RecordStoreError
from .models import CandidateRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def fetch_all(self, scope: str | None = None) -> list[CandidateRecord]: ...

    def get(self, record_id: Any) -> CandidateRecord | None: ...

    def update(self, record: CandidateRecord) -> None: ...

    def delete(self, record_id: Any) -> bool: ...


class InMemoryRecordStore:
    """Dict-backed store; records may be tagged with a scope (e.g. owning user)."""

    def __init__(self, records: list[CandidateRecord] | None = None, scope: str | None = None) -> None:
        self._records: dict[Any, CandidateRecord] = {}
        self._scopes: dict[Any, str | None] = {}
        for record in records or []:
            self.add(record, scope=scope)

    def add(self, record: CandidateRecord, scope: str | None = None) -> None:
        if record.record_id is None:
            raise RecordStoreError(f"cannot store a record without an id: {record.business_name!r}")
        self._records[record.record_id] = record
        self._scopes[record.record_id] = scope

    def fetch_all(self, scope: str | None = None) -> list[CandidateRecord]:
        if scope is None:
            return list(self._records.values())
        return [r for rid, r in self._records.items() if self._scopes.get(rid) == scope]

    def get(self, record_id: Any) -> CandidateRecord | None:
        return self._records.get(record_id)

    def update(self, record: CandidateRecord) -> None:
        if record.record_id not in self._records:
            raise RecordStoreError(f"record {record.record_id!r} is not in the store")
        self._records[record.record_id] = record

    def delete(self, record_id: Any) -> bool:
        self._scopes.pop(record_id, None)
        return self._records.pop(record_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class JsonRecordStore(InMemoryRecordStore):
    """
    Store backed by a JSON file holding a list of record objects.

    Keys may be snake_case or the camelCase used by the web client
    (``businessName``, ``zip``). Every update/delete rewrites the file.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            raise RecordStoreError(f"Record file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordStoreError(f"Invalid JSON in {self.path}: {e}") from e
        except OSError as e:
            raise RecordStoreError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise RecordStoreError(f"{self.path} must contain a JSON list of records")

        skipped = 0
        for item in raw:
            if not isinstance(item, dict):
                skipped += 1
                continue
            record = CandidateRecord.from_dict(item)
            if record.record_id is None:
                skipped += 1
                continue
            self.add(record)
        if skipped:
            logger.warning("Skipped %d entries without an id in %s", skipped, self.path)
        logger.info("Loaded %d records from %s", len(self), self.path)

    def save(self) -> None:
        records = [r.to_dict() for r in self.fetch_all()]
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)

    def update(self, record: CandidateRecord) -> None:
        super().update(record)
        self.save()

    def delete(self, record_id: Any) -> bool:
        removed = super().delete(record_id)
        if removed:
            self.save()
        return removed
