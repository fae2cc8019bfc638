"""Tests for prospect_dedup.engine — caller-facing duplicate engine."""

import threading

import pytest

from prospect_dedup.algorithms.composite_scorer import EngineConfig
from prospect_dedup.engine import DEFAULT_MAX_RESULTS, DuplicateEngine
from prospect_dedup.errors import ConfigError, ScanCancelled
from prospect_dedup.models import DUPLICATE, CandidateRecord
from prospect_dedup.record_store import InMemoryRecordStore


@pytest.fixture
def engine():
    return DuplicateEngine()


# ---- configuration ----------------------------------------------------------


class TestConfig:
    def test_default_config(self, engine):
        assert engine.config == EngineConfig()
        assert engine.get_config()["duplicateThreshold"] == 0.75

    def test_update_returns_applied_camel_case(self, engine):
        applied = engine.update_config({"nameWeight": 0.5, "bogus": 3})
        assert applied == {"nameWeight": 0.5}
        assert engine.config.name_weight == 0.5

    def test_update_snake_case(self, engine):
        applied = engine.update_config({"phone_match_is_duplicate": False})
        assert applied == {"phoneMatchIsDuplicate": False}
        assert engine.config.phone_match_is_duplicate is False

    def test_out_of_range_value_ignored(self, engine):
        assert engine.update_config({"domainWeight": 7}) == {}
        assert engine.config == EngineConfig()

    def test_ordering_violation_rejected_atomically(self, engine):
        with pytest.raises(ConfigError):
            engine.update_config({"nameWeight": 0.9, "potentialDuplicateThreshold": 0.95})
        assert engine.config == EngineConfig()

    def test_snapshot_unaffected_by_later_update(self, engine):
        snapshot = engine.config
        engine.update_config({"duplicateThreshold": 0.9})
        assert snapshot.duplicate_threshold == 0.75
        assert engine.config.duplicate_threshold == 0.9

    def test_concurrent_updates_leave_valid_config(self, engine):
        def worker(value):
            for _ in range(50):
                engine.update_config({"nameWeight": value})

        threads = [threading.Thread(target=worker, args=(v,)) for v in (0.2, 0.6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert engine.config.name_weight in (0.2, 0.6)


# ---- check_duplicate --------------------------------------------------------


class TestCheckDuplicate:
    def test_detects_duplicate(self, engine, sample_records):
        candidate = CandidateRecord(business_name="Joe's Pizzeria", phone="555-123-4567")
        result = engine.check_duplicate(candidate, sample_records)
        assert result.is_duplicate is True
        assert result.is_potential_duplicate is True
        assert result.matches[0].record.record_id in (1, 2)
        assert result.best.classification == DUPLICATE
        assert result.candidates_checked == len(sample_records)

    def test_no_match(self, engine, sample_records):
        candidate = CandidateRecord(business_name="Lakeside Marina", phone="312-555-0000")
        result = engine.check_duplicate(candidate, sample_records)
        assert result.is_duplicate is False
        assert result.is_potential_duplicate is False
        assert result.matches == []
        assert result.best is None
        assert result.highest_score == 0.0

    def test_skips_record_with_same_id(self, engine, sample_records):
        result = engine.check_duplicate(sample_records[0], sample_records)
        ids = [m.record.record_id for m in result.matches]
        assert 1 not in ids
        assert set(ids) == {2, 3}

    def test_matches_ordered_and_capped(self, engine):
        existing = [
            CandidateRecord(business_name="Joes Pizza", record_id=i, phone="555-123-4567")
            for i in range(15)
        ]
        result = engine.check_duplicate(CandidateRecord(business_name="Joes Pizza"), existing)
        assert len(result.matches) == DEFAULT_MAX_RESULTS
        result = engine.check_duplicate(CandidateRecord(business_name="Joes Pizza"), existing, max_results=3)
        assert len(result.matches) == 3
        scores = [m.score for m in result.matches]
        assert scores == sorted(scores, reverse=True)

    def test_duplicates_listed_before_potentials(self, engine):
        existing = [
            # token overlap 0.67, no other shared field
            CandidateRecord(business_name="Joes Pizza Kitchen Bar", record_id="potential"),
            CandidateRecord(business_name="Acme Tools", record_id="escalated", phone="555-123-4567"),
        ]
        candidate = CandidateRecord(business_name="Joes Pizza", phone="555-123-4567")
        result = engine.check_duplicate(candidate, existing)
        assert [m.record.record_id for m in result.matches] == ["escalated", "potential"]
        assert result.is_duplicate is True

    def test_to_dict(self, engine, sample_records):
        candidate = CandidateRecord(business_name="Joes Pizza", phone="555-123-4567")
        d = engine.check_duplicate(candidate, sample_records).to_dict()
        assert d["is_duplicate"] is True
        assert d["matches"][0]["classification"] == DUPLICATE
        assert "record" in d["matches"][0]


class TestCheckBatch:
    def test_keyed_by_id_or_name(self, engine, sample_records):
        new = [
            CandidateRecord(business_name="Joe's Pizzeria", record_id="n1", phone="555-123-4567"),
            CandidateRecord(business_name="Lakeside Marina"),
        ]
        results = engine.check_batch(new, sample_records)
        assert set(results) == {"n1", "Lakeside Marina"}
        assert results["n1"].is_duplicate is True
        assert results["Lakeside Marina"].is_potential_duplicate is False


# ---- scan_collection --------------------------------------------------------


class TestScanCollection:
    def test_groups_sample(self, engine, sample_records):
        report = engine.scan_collection(sample_records)
        assert report.comparisons == 15
        assert len(report.pairs) == 3
        assert len(report.groups) == 1
        assert sorted(report.groups[0].record_ids) == [1, 2, 3]

    def test_pairs_sorted_by_score(self, engine, sample_records):
        report = engine.scan_collection(sample_records)
        scores = [p.result.score for p in report.pairs]
        assert scores == sorted(scores, reverse=True)

    def test_summary(self, engine, sample_records):
        summary = engine.scan_collection(sample_records).summary()
        assert summary["total_records"] == 6
        assert summary["duplicate_pairs"] == 3
        assert summary["potential_duplicate_pairs"] == 0
        assert summary["duplicate_groups"] == 1
        assert summary["records_in_groups"] == 3
        assert summary["blocking"] is None

    def test_blocking(self, engine, sample_records):
        report = engine.scan_collection(sample_records, blocking="postal_prefix")
        assert report.comparisons == 10
        assert report.blocking == "postal_prefix"
        assert len(report.groups) == 1

    def test_threshold_override_does_not_touch_config(self, engine, sample_records):
        engine.scan_collection(sample_records, potential_threshold=0.1)
        assert engine.config.potential_duplicate_threshold == 0.60

    def test_invalid_threshold_override(self, engine, sample_records):
        with pytest.raises(ConfigError):
            engine.scan_collection(sample_records, potential_threshold=0.9)

    def test_cancel(self, engine, sample_records):
        with pytest.raises(ScanCancelled):
            engine.scan_collection(sample_records, should_cancel=lambda: True)

    def test_empty_collection(self, engine):
        report = engine.scan_collection([])
        assert report.pairs == []
        assert report.groups == []
        assert report.comparisons == 0

    def test_scan_store_scope(self, engine, sample_records):
        store = InMemoryRecordStore(sample_records[:3], scope="user-1")
        for record in sample_records[3:]:
            store.add(record, scope="user-2")
        report = engine.scan_store(store, "user-2")
        assert report.total_records == 3
        assert report.groups == []
        report = engine.scan_store(store, "user-1")
        assert len(report.groups) == 1
