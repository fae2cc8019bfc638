"""Exceptions raised by the deduplication engine."""

from __future__ import annotations


class DedupError(Exception):
    """Base exception for the deduplication engine."""


class ConfigError(DedupError, ValueError):
    """An EngineConfig failed validation."""


class MissingIdentifierError(DedupError, ValueError):
    """A record has no identifier where the operation needs one."""


class RecordNotFoundError(DedupError, LookupError):
    """A record id is not present in the record store."""


class RecordStoreError(DedupError):
    """The backing file of a record store is missing or unreadable."""


class ScanCancelled(DedupError):
    """A scan was abandoned by its caller."""
