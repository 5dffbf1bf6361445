"""Tests for the provenance tracker."""

import pytest

from carbon_impact.config import CarbonImpactConfig, set_config
from carbon_impact.provenance import (
    ProvenanceTracker,
    compute_hash,
    get_provenance_tracker,
    reset_provenance_tracker,
)


class TestComputeHash:

    def test_key_order_irrelevant(self):
        assert compute_hash({"a": 1, "b": 2}) == compute_hash({"b": 2, "a": 1})

    def test_values_matter(self):
        assert compute_hash({"a": 1}) != compute_hash({"a": 2})

    def test_none(self):
        assert len(compute_hash(None)) == 64


class TestChainLinks:

    def test_entries_link_to_parent(self):
        tracker = ProvenanceTracker()
        first = tracker.record("ccs", "calculate", "id-1", data={"x": 1})
        second = tracker.record("mcs", "calculate", "id-2", data={"x": 2})
        assert first.sequence == 0 and second.sequence == 1
        assert first.parent_hash == tracker.genesis_hash
        assert second.parent_hash == first.hash_value
        assert tracker.last_hash == second.hash_value
        assert tracker.verify_chain() is True

    def test_data_hash_follows_document(self):
        entry = ProvenanceTracker().record("ccs", "calculate", "id-1", data={"x": 1})
        assert entry.data_hash == compute_hash({"x": 1})

    def test_tampered_data_hash_detected(self):
        tracker = ProvenanceTracker()
        tracker.record("ccs", "calculate", "id-1", data={"x": 1})
        entry = tracker.record("ccs", "calculate", "id-2", data={"x": 2})
        entry.data_hash = compute_hash({"x": 3})
        assert tracker.verify_chain() is False

    def test_broken_link_detected(self, caplog):
        tracker = ProvenanceTracker()
        tracker.record("sink", "calculate", "id-1")
        entry = tracker.record("sink", "calculate", "id-2")
        entry.parent_hash = "0" * 64
        with caplog.at_level("WARNING", logger="carbon_impact.provenance"):
            assert tracker.verify_chain() is False
        assert "broken at entry 1" in caplog.text

    @pytest.mark.parametrize("args", [
        ("", "calculate", "id"), ("ccs", "", "id"), ("ccs", "calculate", ""),
    ])
    def test_empty_arguments_rejected(self, args):
        with pytest.raises(ValueError):
            ProvenanceTracker().record(*args)

    def test_genesis_depends_on_anchor(self):
        assert ProvenanceTracker("a").genesis_hash != ProvenanceTracker("b").genesis_hash

    def test_empty_log_is_valid(self):
        tracker = ProvenanceTracker()
        assert tracker.verify_chain() is True
        assert tracker.last_hash == tracker.genesis_hash


class TestQueries:

    def test_filters_and_limit(self):
        tracker = ProvenanceTracker()
        for i in range(3):
            tracker.record("ccs", "calculate", f"c{i}")
        tracker.record("mcs", "calculate", "m0")
        assert len(tracker.get_entries("ccs")) == 3
        assert [e.entity_id for e in tracker.get_entries(limit=2)] == ["c2", "m0"]
        assert [e.entity_id for e in tracker.get_entries("ccs", limit=1)] == ["c2"]

    def test_entries_indexed_by_entity(self):
        tracker = ProvenanceTracker()
        entry = tracker.record("sink", "calculate", "abc", data={"a": 1})
        tracker.record("sink", "calculate", "def")
        assert tracker.get_entries_for_entity("sink", "abc") == [entry]
        assert tracker.get_entries_for_entity("ccs", "abc") == []
        assert tracker.entry_count == 2

    def test_to_dict_carries_metadata(self):
        entry = ProvenanceTracker().record(
            "renewable", "calculate", "r1", metadata={"provenance_hash": "h"},
        )
        document = entry.to_dict()
        assert document["entity_type"] == "renewable"
        assert document["metadata"] == {"provenance_hash": "h"}

    def test_unknown_entity_type_warns(self, caplog):
        tracker = ProvenanceTracker()
        with caplog.at_level("WARNING", logger="carbon_impact.provenance"):
            tracker.record("ev", "calculate", "x")
        assert "unknown entity type" in caplog.text
        assert len(tracker) == 1


class TestSingleton:

    def test_singleton_uses_configured_genesis(self):
        set_config(CarbonImpactConfig(genesis_hash="custom-anchor"))
        reset_provenance_tracker()
        tracker = get_provenance_tracker()
        assert tracker is get_provenance_tracker()
        assert tracker.last_hash == ProvenanceTracker("custom-anchor").genesis_hash
