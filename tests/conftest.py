"""Shared sample records for the deduplication test suite."""

from __future__ import annotations

import json

import pytest

from prospect_dedup.models import CandidateRecord

# ---------------------------------------------------------------------------
# Sample prospect records (mirrors the JSON store shape, camelCase keys)
# ---------------------------------------------------------------------------

SAMPLE_PROSPECTS: list[dict] = [
    {
        "id": 1,
        "businessName": "Joe's Pizza LLC",
        "phone": "(555) 123-4567",
        "address": "12 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
        "website": "https://www.joespizza.com/menu",
        "email": "info@joespizza.com",
    },
    {
        "id": 2,
        "businessName": "Joes Pizza",
        "phone": "555.123.4567",
        "address": "12 Main Street",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
        "website": None,
        "email": "orders@joespizza.com",
    },
    {
        "id": 3,
        "businessName": "Pizza Joe's",
        "phone": None,
        "address": "12 Main St.",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701-1234",
        "website": "joespizza.com",
        "email": None,
    },
    {
        "id": 4,
        "businessName": "Greenfield Hardware Inc",
        "phone": "217-555-0199",
        "address": "400 Oak Ave",
        "city": "Springfield",
        "state": "IL",
        "zip": "62704",
        "website": "greenfieldhw.com",
        "email": None,
    },
    {
        "id": 5,
        "businessName": "Blue Heron Books",
        "phone": "217-555-0142",
        "address": "88 Elm St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62702",
        "website": None,
        "email": "owner@gmail.com",
    },
    {
        "id": 6,
        "businessName": "Sunrise Dental",
        "phone": "(217) 555-0110",
        "address": "9 Pine Rd",
        "city": "Decatur",
        "state": "IL",
        "zip": "62521",
        "website": None,
        "email": None,
    },
]


@pytest.fixture
def sample_records() -> list[CandidateRecord]:
    return [CandidateRecord.from_dict(d) for d in SAMPLE_PROSPECTS]


@pytest.fixture
def prospects_file(tmp_path):
    """SAMPLE_PROSPECTS written to a JSON record file."""
    path = tmp_path / "prospects.json"
    path.write_text(json.dumps(SAMPLE_PROSPECTS, indent=2), encoding="utf-8")
    return path
