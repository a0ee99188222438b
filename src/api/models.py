# src/api/models.py — v2
"""API-level models: ArchitectureResult."""

from __future__ import annotations

from pydantic import BaseModel, Field

from archinfer.core.models import (
    FlowCandidate,
    Interaction,
    InteractionIssue,
    Module,
    ModuleImportEdge,
    ModuleLayer,
    ModuleMembership,
)
from archinfer.graph.layers.models import CommunityPartition
from archinfer.graph.process_groups import ProcessGroups


class ProcessGroupSummary(BaseModel):
    """One process group as reported to callers."""

    group_id: int
    label: str
    module_ids: list[int] = Field(default_factory=list)


class ArchitectureResult(BaseModel):
    """Return value of facade.infer_architecture()."""

    codebase_id: str
    run_id: str
    partition: CommunityPartition
    modules: list[Module] = Field(default_factory=list)
    memberships: list[ModuleMembership] = Field(default_factory=list)
    layers: dict[int, ModuleLayer] = Field(default_factory=dict)
    file_modules: dict[int, int] = Field(default_factory=dict)
    module_imports: list[ModuleImportEdge] = Field(default_factory=list)
    interactions: list[Interaction] = Field(default_factory=list)
    process_groups: ProcessGroups = Field(default_factory=ProcessGroups)
    group_summaries: list[ProcessGroupSummary] = Field(default_factory=list)
    cross_group_pairs: list[tuple[int, int]] = Field(default_factory=list)
    issues: list[InteractionIssue] = Field(default_factory=list)
    flows: list[FlowCandidate] = Field(default_factory=list)
    dropped_flow_count: int = 0
