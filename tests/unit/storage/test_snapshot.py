# tests/unit/storage/test_snapshot.py — v1
"""Tests for storage/snapshot.py — snapshot loading and result writing."""

from __future__ import annotations

import json

import pytest

from archinfer.core.models import Module
from archinfer.storage.models import StoreSnapshot
from archinfer.storage.snapshot import SnapshotError, dump_result, load_snapshot, write_result


class TestLoadSnapshot:
    def test_round_trip(self, snapshot_file, sample_snapshot):
        loaded = load_snapshot(snapshot_file)
        assert loaded == sample_snapshot

    def test_string_keys_become_ints(self, raw_snapshot_file):
        path = raw_snapshot_file({"symbol_files": {"1": 10}, "symbol_roles": {"1": ["dao"]}})
        loaded = load_snapshot(path)
        assert loaded.symbol_files == {1: 10}
        assert loaded.symbol_roles == {1: ["dao"]}

    def test_minimal_snapshot(self, raw_snapshot_file):
        loaded = load_snapshot(raw_snapshot_file({}))
        assert loaded.codebase_id == "default"
        assert loaded.call_edges == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="not found"):
            load_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError, match="not valid JSON"):
            load_snapshot(path)

    def test_not_an_object(self, raw_snapshot_file):
        with pytest.raises(SnapshotError, match="JSON object"):
            load_snapshot(raw_snapshot_file([1, 2]))

    def test_validation_failure(self, raw_snapshot_file):
        path = raw_snapshot_file({"call_edges": [{"from_id": 1, "to_id": 2, "weight": 0}]})
        with pytest.raises(SnapshotError, match="failed validation"):
            load_snapshot(path)


class TestWriteResult:
    def test_model(self, tmp_path):
        out = write_result(StoreSnapshot(codebase_id="x"), tmp_path / "out" / "r.json")
        assert json.loads(out.read_text(encoding="utf-8"))["codebase_id"] == "x"

    def test_model_list(self, tmp_path):
        out = write_result([Module(id=1, full_path="p")], tmp_path / "m.json")
        assert json.loads(out.read_text(encoding="utf-8"))[0]["full_path"] == "p"

    def test_dict(self):
        assert json.loads(dump_result({"a": [1, 2]})) == {"a": [1, 2]}
