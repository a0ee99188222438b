# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; every subsystem imports them from core.models.
Identifiers are the integer row ids assigned by the index store.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


# === RAW STORE FACTS ===


class CallEdge(BaseModel):
    """Aggregated call/construct relationship between two symbols.

    One row per (from, to) pair per query source; ``weight`` is the
    number of call sites and ``min_line`` the first usage line.
    """

    from_id: int
    to_id: int
    weight: int = Field(default=1, ge=1)
    min_line: int = 0


class ImportEdge(BaseModel):
    """File-level import as recorded by the parser."""

    from_file_id: int = Field(ge=1)
    to_file_id: int = Field(ge=1)
    is_type_only: bool = False


class ModuleImportEdge(BaseModel):
    """Import relationship lifted to module level."""

    from_module_id: int
    to_module_id: int
    is_type_only: bool = False


# === MODULES ===


class ModuleLayer(str, Enum):
    """Architectural layer of a module."""

    CONTROLLER = "controller"
    SERVICE = "service"
    REPOSITORY = "repository"
    ADAPTER = "adapter"
    UTILITY = "utility"
    UNKNOWN = "unknown"


class Module(BaseModel):
    """Persisted module entity."""

    id: int = Field(ge=1)
    parent_id: int | None = None
    full_path: str
    depth: int = 0
    members: list[int] = Field(default_factory=list)
    layer: ModuleLayer = ModuleLayer.UNKNOWN


class ModuleMembership(BaseModel):
    """Assignment of one symbol to one module."""

    symbol_id: int
    module_id: int
    cohesion: float = Field(default=0.0, ge=0.0, le=1.0)


# === INTERACTIONS ===


class Interaction(BaseModel):
    """Directed, weighted module-to-module edge."""

    id: int
    from_module_id: int
    to_module_id: int
    weight: int = Field(default=1, ge=1)
    source: Literal["ast", "llm-inferred", "contract-matched"] = "ast"
    from_path: str = ""
    to_path: str = ""


class InteractionIssue(BaseModel):
    """Problem found on an inferred interaction."""

    interaction_id: int
    from_module_id: int
    to_module_id: int
    from_path: str = ""
    to_path: str = ""
    kind: Literal["REVERSED", "DIRECTION_CONFUSED", "NO_IMPORTS"]
    issue: str


# === FLOWS ===


class DefinitionStep(BaseModel):
    """One traced definition-to-definition hop of a flow."""

    from_definition_id: int
    to_definition_id: int
    from_module_id: int | None = None
    to_module_id: int | None = None


class FlowCandidate(BaseModel):
    """Higher-level flow proposed upstream, before deduplication."""

    name: str = ""
    slug: str = ""
    interaction_ids: list[int] = Field(default_factory=list)
    tier: int = 1
    action_type: str | None = None
    target_entity: str | None = None
    definition_steps: list[DefinitionStep] = Field(default_factory=list)
    stakeholder: str = "user"
    description: str = ""
