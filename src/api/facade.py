# src/api/facade.py — v2
"""Public API facade — single entry point for architecture inference.

Usage:
    from archinfer.api.facade import infer_architecture
    result = infer_architecture(snapshot)

Stages, in order:
  1. Merge call edges from both query sources, build the symbol graph
  2. Detect communities and turn them into flat modules
  3. Classify module layers from member annotations
  4. Derive module interactions and module-level imports
  5. Classify process groups and validate inferred interactions
  6. Deduplicate flow candidates
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from archinfer.api.models import ArchitectureResult, ProcessGroupSummary
from archinfer.config.settings import Settings
from archinfer.flows.dedup import FlowDeduplicator
from archinfer.graph.builder import (
    assign_file_modules,
    build_module_graph,
    build_symbol_graph,
    lift_import_edges,
    merge_call_edges,
    module_interactions,
)
from archinfer.graph.interaction_validator import validate_inferred_interactions
from archinfer.graph.layers.community_detector import detect_communities
from archinfer.graph.layers.community_integrator import build_modules, membership_map
from archinfer.graph.layers.layer_classifier import apply_layers, classify_layers
from archinfer.graph.process_groups import (
    ProcessGroups,
    classify_process_groups,
    cross_group_pairs,
    get_process_group_label,
)
from archinfer.logging.context import clear_context, set_run_context, set_stage_context
from archinfer.storage.models import StoreSnapshot

logger = logging.getLogger(__name__)


def infer_architecture(
    snapshot: StoreSnapshot,
    settings: Settings | None = None,
) -> ArchitectureResult:
    """Infer modules, interactions, process groups and flows for a codebase.

    Args:
        snapshot: Raw store facts for one codebase.
        settings: Engine settings. Loaded from .env if None.

    Returns:
        ArchitectureResult with every stage's output.
    """
    settings = settings or Settings()
    run_id = _generate_run_id(snapshot.codebase_id)
    set_run_context(snapshot.codebase_id, run_id)

    logger.info(
        "Starting inference: codebase_id=%s, run_id=%s", snapshot.codebase_id, run_id,
    )

    try:
        # --- Stage 1-2: symbol graph and modules ---
        set_stage_context("modules", "graph")
        call_edges = merge_call_edges(snapshot.call_edges, snapshot.import_call_edges)
        symbol_graph = build_symbol_graph(call_edges)

        set_stage_context("modules", "louvain")
        partition = detect_communities(
            symbol_graph,
            resolution=settings.community_resolution,
            min_gain=settings.community_min_gain,
            max_iterations=settings.louvain_max_iterations,
            min_community_size=settings.community_min_size,
            max_levels=settings.louvain_max_levels,
        )
        modules, memberships = build_modules(partition, settings.root_module_path)

        # --- Stage 3: layers ---
        set_stage_context("modules", "layers")
        layers = classify_layers(modules, snapshot.symbol_roles)
        modules = apply_layers(modules, layers)

        # --- Stage 4: interactions ---
        set_stage_context("interactions", "ast")
        membership = membership_map(memberships)
        module_graph = build_module_graph(call_edges, membership)
        supplied = snapshot.interactions
        next_id = max((i.id for i in supplied), default=0) + 1
        interactions = supplied + module_interactions(module_graph, modules, start_id=next_id)

        file_modules = assign_file_modules(snapshot.symbol_files, membership)
        module_imports = lift_import_edges(snapshot.import_edges, file_modules)

        # --- Stage 5: process groups and validation ---
        set_stage_context("interactions", "process-groups")
        groups = classify_process_groups(modules, file_modules, snapshot.import_edges)
        pairs = cross_group_pairs(groups, skip_empty=settings.cross_process_skip_empty_groups)

        set_stage_context("interactions", "validate")
        issues = validate_inferred_interactions(interactions, module_imports, groups)

        # --- Stage 6: flows ---
        set_stage_context("flows", "dedup")
        flows = FlowDeduplicator(settings.flow_min_overlap_ratio).dedup(snapshot.flows)
    finally:
        clear_context()

    result = ArchitectureResult(
        codebase_id=snapshot.codebase_id,
        run_id=run_id,
        partition=partition,
        modules=modules,
        memberships=memberships,
        layers=layers,
        file_modules=file_modules,
        module_imports=module_imports,
        interactions=interactions,
        process_groups=groups,
        group_summaries=summarize_groups(groups),
        cross_group_pairs=pairs,
        issues=issues,
        flows=flows,
        dropped_flow_count=len(snapshot.flows) - len(flows),
    )

    logger.info(
        "Inference complete: codebase_id=%s, modules=%d, interactions=%d, "
        "process_groups=%d, issues=%d, flows=%d",
        snapshot.codebase_id,
        len(modules) - 1,
        len(interactions),
        groups.group_count,
        len(issues),
        len(flows),
    )
    return result


def summarize_groups(groups: ProcessGroups) -> list[ProcessGroupSummary]:
    """Label each process group, in ascending group id order."""
    return [
        ProcessGroupSummary(
            group_id=group_id,
            label=get_process_group_label(members),
            module_ids=[m.id for m in members],
        )
        for group_id, members in sorted(groups.group_to_modules.items())
    ]


def _generate_run_id(codebase_id: str) -> str:
    """Generate a run ID: yyyymmdd_hhmm_{uuid5}."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    run_uuid = uuid.uuid5(uuid.NAMESPACE_DNS, f"{codebase_id}_{ts}")
    return f"{ts}_{run_uuid.hex[:12]}"
