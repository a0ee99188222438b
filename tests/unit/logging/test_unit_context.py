# tests/unit/logging/test_unit_context.py — v2
"""Tests for logging/context.py — contextual logging variables."""

from __future__ import annotations

from archinfer.logging.context import (
    clear_context,
    get_context,
    set_run_context,
    set_stage_context,
)


class TestLogContext:
    def test_initial_state(self):
        ctx = get_context()
        assert ctx.codebase_id is None
        assert ctx.run_id is None
        assert ctx.stage is None

    def test_set_run_context(self):
        set_run_context("shop", "run1")
        ctx = get_context()
        assert ctx.codebase_id == "shop"
        assert ctx.run_id == "run1"

    def test_set_stage_context(self):
        set_stage_context("interactions", "validate")
        ctx = get_context()
        assert ctx.stage == "interactions"
        assert ctx.step == "validate"

    def test_stage_without_step_resets_step(self):
        set_stage_context("modules", "louvain")
        set_stage_context("flows")
        assert get_context().step is None

    def test_as_dict_filters_none(self):
        set_run_context("shop", "run1")
        assert get_context().as_dict() == {"codebase_id": "shop", "run_id": "run1"}

    def test_clear_context(self):
        set_run_context("shop", "run1")
        set_stage_context("flows", "dedup")
        clear_context()
        assert get_context().as_dict() == {}
