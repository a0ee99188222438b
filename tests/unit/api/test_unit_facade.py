# tests/unit/api/test_unit_facade.py — v2
"""Tests for api/facade.py — end-to-end inference over a snapshot."""

from __future__ import annotations

import logging

from archinfer.api.facade import infer_architecture, summarize_groups
from archinfer.config.settings import Settings
from archinfer.core.models import ModuleImportEdge, ModuleLayer
from archinfer.logging.context import get_context
from archinfer.storage.models import StoreSnapshot


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestInferArchitecture:
    def test_modules(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert result.codebase_id == "shop"
        assert [m.full_path for m in result.modules] == [
            "project", "project.community-0", "project.community-1",
        ]
        assert result.modules[1].members == [10, 11, 12, 13]
        assert len(result.memberships) == 8

    def test_layers(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert result.layers == {
            1: ModuleLayer.UNKNOWN, 2: ModuleLayer.CONTROLLER, 3: ModuleLayer.REPOSITORY,
        }
        assert result.modules[2].layer is ModuleLayer.REPOSITORY

    def test_interactions_follow_supplied_ids(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        ast = [i for i in result.interactions if i.source == "ast"]
        assert [(i.id, i.from_module_id, i.to_module_id) for i in ast] == [(101, 2, 3)]
        assert result.interactions[0].id == 100

    def test_files_and_imports(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert result.file_modules == {500: 2, 501: 2, 600: 3, 601: 3}
        assert result.module_imports == [
            ModuleImportEdge(from_module_id=3, to_module_id=2, is_type_only=True),
        ]

    def test_process_groups(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert result.process_groups.module_to_group == {1: -1, 2: 500, 3: 600}
        assert result.cross_group_pairs == [(-1, 500), (-1, 600), (500, 600)]
        assert [g.label for g in result.group_summaries] == ["project", "community-0", "community-1"]

    def test_skip_empty_groups(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings(cross_process_skip_empty_groups=True))
        assert result.cross_group_pairs == [(500, 600)]

    def test_cross_process_inferred_interaction_not_flagged(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert result.issues == []

    def test_same_process_inferred_interaction_flagged(self, sample_snapshot):
        snapshot = sample_snapshot.model_copy(update={
            "import_edges": sample_snapshot.import_edges[:2] + [
                sample_snapshot.import_edges[2].model_copy(update={"is_type_only": False}),
            ],
        })
        result = infer_architecture(snapshot, _settings())
        assert result.process_groups.module_to_group[2] == result.process_groups.module_to_group[3]
        assert [i.kind for i in result.issues] == ["DIRECTION_CONFUSED"]

    def test_flows_deduplicated(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings())
        assert [f.slug for f in result.flows] == ["list-orders-detailed", "checkout-journey"]
        assert result.dropped_flow_count == 1

    def test_min_size_leaves_symbols_unassigned(self, sample_snapshot):
        result = infer_architecture(sample_snapshot, _settings(community_min_size=5))
        assert len(result.modules) == 1
        assert sorted(result.partition.unassigned) == [10, 11, 12, 13, 20, 21, 22, 23]
        assert result.interactions[0].id == 100
        assert len(result.interactions) == 1

    def test_empty_snapshot(self):
        result = infer_architecture(StoreSnapshot(), _settings())
        assert result.partition.modularity == 0.0
        assert len(result.modules) == 1
        assert result.flows == []

    def test_context_cleared_and_logged(self, sample_snapshot, caplog):
        with caplog.at_level(logging.INFO, logger="archinfer"):
            result = infer_architecture(sample_snapshot, _settings())
        assert get_context().as_dict() == {}
        assert result.run_id
        assert any("Inference complete" in r.getMessage() for r in caplog.records)


class TestSummarizeGroups:
    def test_group_order(self, sample_modules, sample_file_modules, sample_import_edges):
        from archinfer.graph.process_groups import classify_process_groups

        groups = classify_process_groups(sample_modules, sample_file_modules, sample_import_edges)
        summaries = summarize_groups(groups)
        assert [s.group_id for s in summaries] == [-5, -1, 100, 103]
        assert summaries[2].label == "api"
        assert summaries[2].module_ids == [2, 3]
