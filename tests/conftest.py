# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample call/import edges, modules, flow candidates, a complete
store snapshot and temp snapshot files. No external I/O beyond tmp_path.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import networkx as nx
import pytest

from archinfer.core.models import (
    CallEdge,
    DefinitionStep,
    FlowCandidate,
    ImportEdge,
    Interaction,
    Module,
)
from archinfer.graph.builder import build_symbol_graph
from archinfer.logging.context import clear_context
from archinfer.storage.models import StoreSnapshot


# === FIXTURES: Call graphs ===


@pytest.fixture
def two_paths_edges() -> list[CallEdge]:
    """Two disjoint weighted paths: 1-2-3 and 4-5-6."""
    return [
        CallEdge(from_id=1, to_id=2, weight=5),
        CallEdge(from_id=2, to_id=3, weight=5),
        CallEdge(from_id=4, to_id=5, weight=5),
        CallEdge(from_id=5, to_id=6, weight=5),
    ]


@pytest.fixture
def two_paths_graph(two_paths_edges: list[CallEdge]) -> nx.Graph:
    return build_symbol_graph(two_paths_edges)


@pytest.fixture
def bridged_clusters_edges() -> list[CallEdge]:
    """Two dense 4-symbol clusters (10-13, 20-23) joined by one light bridge."""
    edges: list[CallEdge] = []
    for base in (10, 20):
        ids = [base, base + 1, base + 2, base + 3]
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                edges.append(CallEdge(from_id=a, to_id=b, weight=3))
    edges.append(CallEdge(from_id=13, to_id=20, weight=1))
    return edges


# === FIXTURES: Modules and imports ===


@pytest.fixture
def sample_modules() -> list[Module]:
    """Four depth-1 modules under a root, without files for module 5."""
    return [
        Module(id=1, full_path="project", depth=0),
        Module(id=2, parent_id=1, full_path="project.api.routes", depth=1),
        Module(id=3, parent_id=1, full_path="project.api.services", depth=1),
        Module(id=4, parent_id=1, full_path="project.worker.jobs", depth=1),
        Module(id=5, parent_id=1, full_path="project.docs", depth=1),
    ]


@pytest.fixture
def sample_file_modules() -> dict[int, int]:
    """file_id -> module_id; files 100-101 in module 2, 102 in 3, 103 in 4."""
    return {100: 2, 101: 2, 102: 3, 103: 4}


@pytest.fixture
def sample_import_edges() -> list[ImportEdge]:
    """Runtime import 100->102 joins modules 2 and 3; 103 imports 102 types only."""
    return [
        ImportEdge(from_file_id=100, to_file_id=102),
        ImportEdge(from_file_id=101, to_file_id=100),
        ImportEdge(from_file_id=103, to_file_id=102, is_type_only=True),
    ]


# === FIXTURES: Flows ===


def _make_flow(
    ids: list[int],
    *,
    tier: int = 1,
    action: str | None = None,
    entity: str | None = None,
    steps: int = 0,
    slug: str = "",
) -> FlowCandidate:
    """Build a FlowCandidate with ``steps`` synthetic definition steps."""
    return FlowCandidate(
        name=slug or "flow",
        slug=slug,
        interaction_ids=ids,
        tier=tier,
        action_type=action,
        target_entity=entity,
        definition_steps=[
            DefinitionStep(from_definition_id=i, to_definition_id=i + 1)
            for i in range(steps)
        ],
    )


# === FIXTURES: Snapshots ===


@pytest.fixture
def sample_snapshot(bridged_clusters_edges: list[CallEdge]) -> StoreSnapshot:
    """Two clusters, each spread over two files that import each other at runtime."""
    symbol_files = {s: 500 for s in (10, 11)}
    symbol_files.update({s: 501 for s in (12, 13)})
    symbol_files.update({s: 600 for s in (20, 21)})
    symbol_files.update({s: 601 for s in (22, 23)})
    return StoreSnapshot(
        codebase_id="shop",
        call_edges=bridged_clusters_edges[:6],
        import_call_edges=bridged_clusters_edges[6:],
        import_edges=[
            ImportEdge(from_file_id=500, to_file_id=501),
            ImportEdge(from_file_id=600, to_file_id=601),
            ImportEdge(from_file_id=600, to_file_id=500, is_type_only=True),
        ],
        symbol_files=symbol_files,
        symbol_roles={
            10: ["controller"], 11: ["handler"], 12: ["service"],
            20: ["repository"], 21: ["dao"], 22: ["repo"],
        },
        interactions=[
            Interaction(
                id=100, from_module_id=2, to_module_id=3, source="llm-inferred",
                from_path="project.community-0", to_path="project.community-1",
            ),
        ],
        flows=[
            _make_flow([1, 2, 3], slug="list-orders"),
            _make_flow([1, 2, 3, 4, 5], steps=2, slug="list-orders-detailed"),
            _make_flow([7, 8], tier=2, slug="checkout-journey"),
        ],
    )


@pytest.fixture
def snapshot_file(tmp_path: Path, sample_snapshot: StoreSnapshot) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(sample_snapshot.model_dump_json(indent=2), encoding="utf-8")
    return path


@pytest.fixture
def raw_snapshot_file(tmp_path: Path):
    """Write an arbitrary JSON payload and return its path."""

    def _write(payload: object, name: str = "raw.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


# === FIXTURES: Logging ===


@pytest.fixture(autouse=True)
def _reset_logging():
    """Reset log context and drop handlers installed by setup_logging()."""
    clear_context()
    yield
    clear_context()
    root = logging.getLogger("archinfer")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
