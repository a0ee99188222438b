# src/storage/models.py — v2
"""Storage models: StoreSnapshot, the JSON export of an index store."""

from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt

from archinfer.core.models import CallEdge, FlowCandidate, ImportEdge, Interaction


class StoreSnapshot(BaseModel):
    """Raw facts read from the index store for one codebase.

    Call edges come from two query sources: the file-internal call graph
    (``call_edges``) and calls resolved through imports
    (``import_call_edges``). They are merged before graph construction.
    """

    codebase_id: str = "default"
    call_edges: list[CallEdge] = Field(default_factory=list)
    import_call_edges: list[CallEdge] = Field(default_factory=list)
    import_edges: list[ImportEdge] = Field(default_factory=list)
    symbol_files: dict[int, PositiveInt] = Field(default_factory=dict)
    symbol_roles: dict[int, list[str]] = Field(default_factory=dict)
    interactions: list[Interaction] = Field(default_factory=list)
    flows: list[FlowCandidate] = Field(default_factory=list)
