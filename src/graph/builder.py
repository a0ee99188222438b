# src/graph/builder.py — v1
"""Call graph builder — constructs NetworkX graphs from raw store facts.

Symbol graph: undirected, integer-weighted, used by community detection.
Module graph: directed, used to derive module-to-module interactions.
Self-loops are never produced by either builder.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

import networkx as nx

from archinfer.core.models import (
    CallEdge,
    ImportEdge,
    Interaction,
    Module,
    ModuleImportEdge,
)

logger = logging.getLogger(__name__)


def merge_call_edges(*sources: Iterable[CallEdge]) -> list[CallEdge]:
    """Collapse call edges from several query sources into one row per pair.

    The store reports calls twice: once from the file-internal call graph
    and once through imports. Rows sharing ``(from_id, to_id)`` are summed
    and keep the smallest usage line. Self-loops are dropped.

    Returns:
        Edges sorted by ``(from_id, to_id)``.
    """
    merged: dict[tuple[int, int], CallEdge] = {}
    dropped_loops = 0

    for source in sources:
        for edge in source:
            if edge.from_id == edge.to_id:
                dropped_loops += 1
                continue
            key = (edge.from_id, edge.to_id)
            existing = merged.get(key)
            if existing is None:
                merged[key] = edge.model_copy()
            else:
                existing.weight += edge.weight
                existing.min_line = min(existing.min_line, edge.min_line)

    if dropped_loops:
        logger.debug("Dropped %d self-loop call edges", dropped_loops)

    return [merged[key] for key in sorted(merged)]


def build_symbol_graph(call_edges: Iterable[CallEdge]) -> nx.Graph:
    """Build the undirected symbol graph used for community detection.

    Nodes are all symbols appearing in any edge. A directed call
    contributes its weight to the undirected edge between its endpoints,
    so ``A -> B`` and ``B -> A`` accumulate on the same edge. Summation
    makes the result independent of input order.

    Args:
        call_edges: Raw or merged call edges.

    Returns:
        NetworkX Graph with an integer ``weight`` attribute on every edge.
    """
    graph = nx.Graph()

    for edge in call_edges:
        if edge.from_id == edge.to_id:
            continue
        u, v = sorted((edge.from_id, edge.to_id))
        if graph.has_edge(u, v):
            graph[u][v]["weight"] += edge.weight
        else:
            graph.add_edge(u, v, weight=edge.weight)

    logger.info(
        "Built symbol graph: %d nodes, %d edges, total weight %d",
        graph.number_of_nodes(),
        graph.number_of_edges(),
        total_weight(graph),
    )
    return graph


def total_weight(graph: nx.Graph) -> int:
    """Sum of edge weights, each undirected edge counted once, loops excluded."""
    return sum(
        int(data.get("weight", 1))
        for u, v, data in graph.edges(data=True)
        if u != v
    )


def build_module_graph(
    call_edges: Iterable[CallEdge],
    membership: Mapping[int, int],
) -> nx.DiGraph:
    """Aggregate symbol-level calls into a directed module graph.

    Calls between symbols of the same module are internal cohesion, not
    interactions, and are excluded. Calls touching a symbol without a
    module are skipped.

    Args:
        call_edges: Symbol-level call edges.
        membership: Mapping ``symbol_id -> module_id``.

    Returns:
        DiGraph whose edges carry ``weight`` (summed call sites) and
        ``symbol_pairs`` (number of distinct symbol pairs).
    """
    graph = nx.DiGraph()
    skipped = 0

    for edge in call_edges:
        from_module = membership.get(edge.from_id)
        to_module = membership.get(edge.to_id)
        if from_module is None or to_module is None:
            skipped += 1
            continue
        if from_module == to_module:
            continue
        if graph.has_edge(from_module, to_module):
            data = graph[from_module][to_module]
            data["weight"] += edge.weight
            data["symbol_pairs"] += 1
        else:
            graph.add_edge(from_module, to_module, weight=edge.weight, symbol_pairs=1)

    if skipped:
        logger.debug("Skipped %d call edges touching unassigned symbols", skipped)

    logger.info(
        "Built module graph: %d modules, %d interactions",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def module_interactions(
    module_graph: nx.DiGraph,
    modules: Iterable[Module] = (),
    start_id: int = 1,
) -> list[Interaction]:
    """Turn a module graph into ``ast``-sourced Interaction records.

    Ids are assigned sequentially from ``start_id`` in ``(from, to)`` order.
    """
    paths = {m.id: m.full_path for m in modules}
    interactions: list[Interaction] = []

    for index, (u, v) in enumerate(sorted(module_graph.edges()), start=start_id):
        interactions.append(Interaction(
            id=index,
            from_module_id=u,
            to_module_id=v,
            weight=module_graph[u][v]["weight"],
            source="ast",
            from_path=paths.get(u, ""),
            to_path=paths.get(v, ""),
        ))
    return interactions


def lift_import_edges(
    import_edges: Iterable[ImportEdge],
    file_modules: Mapping[int, int],
) -> list[ModuleImportEdge]:
    """Lift file imports to distinct module-level import edges.

    A module pair is type-only only if every underlying file import is.
    Imports within one module, or touching files without a module, are
    dropped.
    """
    lifted: dict[tuple[int, int], bool] = {}

    for edge in import_edges:
        from_module = file_modules.get(edge.from_file_id)
        to_module = file_modules.get(edge.to_file_id)
        if from_module is None or to_module is None or from_module == to_module:
            continue
        key = (from_module, to_module)
        lifted[key] = lifted.get(key, True) and edge.is_type_only

    return [
        ModuleImportEdge(from_module_id=a, to_module_id=b, is_type_only=type_only)
        for (a, b), type_only in sorted(lifted.items())
    ]


def assign_file_modules(
    symbol_files: Mapping[int, int],
    membership: Mapping[int, int],
) -> dict[int, int]:
    """Map each file to the module owning most of its symbols.

    Ties go to the smallest module id. Files whose symbols are all
    unassigned get no module.

    Args:
        symbol_files: Mapping ``symbol_id -> file_id``.
        membership: Mapping ``symbol_id -> module_id``.

    Returns:
        Mapping ``file_id -> module_id``, sorted by file id.
    """
    votes: dict[int, Counter[int]] = {}
    for symbol, file_id in symbol_files.items():
        module_id = membership.get(symbol)
        if module_id is None:
            continue
        votes.setdefault(file_id, Counter())[module_id] += 1

    return {
        file_id: min(counts, key=lambda mid: (-counts[mid], mid))
        for file_id, counts in sorted(votes.items())
    }
