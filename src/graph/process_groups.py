# src/graph/process_groups.py — v1
"""Process group classifier — runtime reachability over the import graph.

Modules whose files are connected through runtime (non-type-only) imports
can execute in the same process. Modules with no such connectivity are in
separate processes and can only talk through runtime protocols (HTTP, IPC,
queues). Type-only imports vanish at runtime and never connect groups.

Group ids:
  - file-based groups use the smallest file id of their import component;
  - a module owning no files gets the isolated group ``-module_id``.
File and module ids are positive, so the two ranges never meet.
A module whose files span several components joins the component holding
most of its files; ties go to the smallest component id.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from itertools import combinations

import networkx as nx
from pydantic import BaseModel, Field

from archinfer.core.models import ImportEdge, Module

logger = logging.getLogger(__name__)


class ProcessGroups(BaseModel):
    """Module-to-process-group assignment."""

    module_to_group: dict[int, int] = Field(default_factory=dict)
    group_to_modules: dict[int, list[Module]] = Field(default_factory=dict)
    empty_groups: list[int] = Field(default_factory=list)

    @property
    def group_count(self) -> int:
        return len(self.group_to_modules)


def classify_process_groups(
    modules: Iterable[Module],
    file_modules: Mapping[int, int],
    import_edges: Iterable[ImportEdge],
) -> ProcessGroups:
    """Assign every module to a process group.

    Args:
        modules: All modules; each receives a group, file-less ones included.
        file_modules: Mapping ``file_id -> module_id``.
        import_edges: File-level imports; type-only ones are ignored.

    Returns:
        ProcessGroups covering every module.
    """
    invalid = sorted(f for f in file_modules if f < 1)
    if invalid:
        raise ValueError(f"File ids must be positive, got {invalid}")

    file_graph = nx.Graph()
    file_graph.add_nodes_from(file_modules)
    runtime_edges = 0
    for edge in import_edges:
        if edge.is_type_only:
            continue
        file_graph.add_edge(edge.from_file_id, edge.to_file_id)
        runtime_edges += 1

    component_of: dict[int, int] = {}
    for component in nx.connected_components(file_graph):
        representative = min(component)
        for file_id in component:
            component_of[file_id] = representative

    files_by_module: dict[int, list[int]] = {}
    for file_id, module_id in file_modules.items():
        files_by_module.setdefault(module_id, []).append(file_id)

    module_to_group: dict[int, int] = {}
    group_to_modules: dict[int, list[Module]] = {}
    empty_groups: list[int] = []

    for module in sorted(modules, key=lambda m: m.id):
        files = files_by_module.get(module.id)
        if not files:
            group = -module.id
            empty_groups.append(group)
        else:
            counts = Counter(component_of[f] for f in files)
            group = min(counts, key=lambda c: (-counts[c], c))
            if len(counts) > 1:
                logger.debug(
                    "Module %d spans %d import components, assigned to %d",
                    module.id, len(counts), group,
                )
        module_to_group[module.id] = group
        group_to_modules.setdefault(group, []).append(module)

    groups = ProcessGroups(
        module_to_group=module_to_group,
        group_to_modules=dict(sorted(group_to_modules.items())),
        empty_groups=sorted(empty_groups),
    )
    logger.info(
        "Process groups: %d modules in %d groups (%d runtime import edges)",
        len(module_to_group), groups.group_count, runtime_edges,
    )
    return groups


def are_same_process(from_id: int, to_id: int, groups: ProcessGroups) -> bool:
    """True when both modules share a group.

    A module missing from the grouping is treated as same-process: lack of
    information is never evidence of separation.
    """
    from_group = groups.module_to_group.get(from_id)
    to_group = groups.module_to_group.get(to_id)
    if from_group is None or to_group is None:
        return True
    return from_group == to_group


def get_process_description(from_id: int, to_id: int, groups: ProcessGroups) -> str:
    """Human-readable process relationship between two modules."""
    if are_same_process(from_id, to_id, groups):
        return "same-process (shared import graph)"
    return "separate-process (no import connectivity)"


def cross_group_pairs(
    groups: ProcessGroups,
    skip_empty: bool = False,
) -> list[tuple[int, int]]:
    """All unordered pairs of distinct groups, ascending.

    With ``skip_empty``, isolated groups holding a single file-less module
    are left out since they cannot take part in runtime interactions.
    """
    empty = set(groups.empty_groups) if skip_empty else set()
    group_ids = [gid for gid in groups.group_to_modules if gid not in empty]
    return list(combinations(sorted(group_ids), 2))


def get_process_group_label(modules: list[Module]) -> str:
    """Derive a label for a group from its modules' dotted paths.

    Deepest common path below the root when there is one, otherwise the
    most frequent depth-1 segment.
    """
    if not modules:
        return "empty"
    if len(modules) == 1:
        parts = modules[0].full_path.split(".")
        return parts[1] if len(parts) > 1 else parts[0]

    all_parts = [m.full_path.split(".") for m in modules]
    common_depth = 0
    for segments in zip(*all_parts):
        if all(s == segments[0] for s in segments):
            common_depth += 1
        else:
            break

    if common_depth > 1:
        return ".".join(all_parts[0][1:common_depth])

    segment_counts: Counter[str] = Counter(
        parts[1] if len(parts) > 1 else parts[0] for parts in all_parts
    )
    best = max(segment_counts.values())
    return next(seg for seg in segment_counts if segment_counts[seg] == best)
