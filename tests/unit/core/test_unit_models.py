# tests/unit/core/test_unit_models.py — v2
"""Tests for core/models.py — shared domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from archinfer.core.models import (
    CallEdge,
    FlowCandidate,
    ImportEdge,
    Interaction,
    InteractionIssue,
    Module,
    ModuleLayer,
    ModuleMembership,
)


class TestCallEdge:
    def test_defaults(self):
        edge = CallEdge(from_id=1, to_id=2)
        assert edge.weight == 1
        assert edge.min_line == 0

    def test_weight_must_be_positive(self):
        with pytest.raises(ValidationError):
            CallEdge(from_id=1, to_id=2, weight=0)


class TestModule:
    def test_defaults(self):
        m = Module(id=1, full_path="project")
        assert m.parent_id is None
        assert m.members == []
        assert m.layer is ModuleLayer.UNKNOWN

    def test_layer_from_string(self):
        assert Module(id=1, full_path="p", layer="service").layer is ModuleLayer.SERVICE

    @pytest.mark.parametrize("module_id", [0, -4])
    def test_id_must_be_positive(self, module_id):
        with pytest.raises(ValidationError):
            Module(id=module_id, full_path="p")


class TestImportEdge:
    def test_file_ids_must_be_positive(self):
        with pytest.raises(ValidationError):
            ImportEdge(from_file_id=0, to_file_id=3)
        with pytest.raises(ValidationError):
            ImportEdge(from_file_id=3, to_file_id=-1)


class TestModuleMembership:
    def test_cohesion_range(self):
        with pytest.raises(ValidationError):
            ModuleMembership(symbol_id=1, module_id=2, cohesion=1.5)


class TestInteraction:
    def test_source_literal(self):
        with pytest.raises(ValidationError):
            Interaction(id=1, from_module_id=1, to_module_id=2, source="guess")

    def test_default_source(self):
        assert Interaction(id=1, from_module_id=1, to_module_id=2).source == "ast"


class TestInteractionIssue:
    def test_kind_literal(self):
        with pytest.raises(ValidationError):
            InteractionIssue(
                interaction_id=1, from_module_id=1, to_module_id=2, kind="ODD", issue="x",
            )


class TestFlowCandidate:
    def test_defaults(self):
        f = FlowCandidate()
        assert f.tier == 1
        assert f.interaction_ids == []
        assert f.action_type is None
        assert f.definition_steps == []
