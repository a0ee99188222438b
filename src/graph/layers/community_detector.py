# src/graph/layers/community_detector.py — v2
"""Module boundary detection via Louvain modularity optimization.

Pure function: takes the undirected symbol graph, returns a
CommunityPartition. Does NOT modify the input graph.

Algorithm (per level):
  1. One singleton community per node.
  2. Visit nodes in ascending id order. For each node, compare the gain of
     re-joining its own community with the gain of joining each neighboring
     community; move it to the strictly best neighbor when the net gain
     exceeds ``min_gain``. Aggregates are updated incrementally.
  3. Repeat full passes until one produces no move or the cap is hit.
Optionally, communities are then collapsed into super-nodes and the
local-move phase is repeated on the aggregated graph.

Node order is part of the contract: nodes are always visited in ascending
id order, which fixes tie-breaking and makes results reproducible.
Weights and degrees are accumulated as integers and only converted to
float inside the gain and modularity formulas.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import networkx as nx

from archinfer.graph.layers.models import Community, CommunityPartition

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 1.0
DEFAULT_MIN_GAIN = 0.0001
MAX_LOUVAIN_ITERATIONS = 100


@dataclass
class _LevelGraph:
    """Working graph for one Louvain level.

    ``self_weight`` is the internal weight (2x convention) a super-node
    carries from the level below; zero for original symbols.
    """

    order: list[int]
    adjacency: dict[int, dict[int, int]]
    degree: dict[int, int]
    self_weight: dict[int, int]
    members: dict[int, list[int]]
    symbol_adjacency: dict[int, dict[int, int]]


@dataclass
class CommunityTable:
    """Arena of community aggregates owned by a single optimization run."""

    internal: dict[int, int] = field(default_factory=dict)
    total: dict[int, int] = field(default_factory=dict)
    nodes: dict[int, set[int]] = field(default_factory=dict)
    assignment: dict[int, int] = field(default_factory=dict)

    @classmethod
    def singletons(cls, level: _LevelGraph) -> CommunityTable:
        table = cls()
        for node in level.order:
            table.internal[node] = level.self_weight[node]
            table.total[node] = level.degree[node]
            table.nodes[node] = {node}
            table.assignment[node] = node
        return table

    def remove(self, node: int, links_in: int, degree: int, self_weight: int) -> int:
        """Detach ``node`` from its community, returning the vacated id."""
        community = self.assignment.pop(node)
        self.internal[community] -= 2 * links_in + self_weight
        self.total[community] -= degree
        self.nodes[community].discard(node)
        return community

    def insert(
        self, node: int, community: int, links_in: int, degree: int, self_weight: int,
    ) -> None:
        if community not in self.nodes:
            self.internal[community] = 0
            self.total[community] = 0
            self.nodes[community] = set()
        self.internal[community] += 2 * links_in + self_weight
        self.total[community] += degree
        self.nodes[community].add(node)
        self.assignment[node] = community

    def drop_if_empty(self, community: int) -> None:
        if not self.nodes.get(community):
            self.internal.pop(community, None)
            self.total.pop(community, None)
            self.nodes.pop(community, None)


def detect_communities(
    graph: nx.Graph,
    resolution: float = DEFAULT_RESOLUTION,
    min_gain: float = DEFAULT_MIN_GAIN,
    max_iterations: int = MAX_LOUVAIN_ITERATIONS,
    min_community_size: int = 3,
    max_levels: int = 1,
) -> CommunityPartition:
    """Partition the symbol graph into candidate modules.

    Args:
        graph: Undirected symbol graph with integer ``weight`` edges.
        resolution: Null-model multiplier (higher = smaller communities).
        min_gain: Net modularity gain a move must exceed.
        max_iterations: Cap on full local-move passes per level.
        min_community_size: Communities smaller than this are not emitted;
            their members are reported as unassigned.
        max_levels: Number of aggregation levels (1 = local moves only).

    Returns:
        CommunityPartition with full membership and emitted communities.
    """
    level = _initial_level(graph)
    m = sum(sum(nbrs.values()) for nbrs in level.adjacency.values()) // 2

    if not level.order:
        return CommunityPartition(resolution=resolution)

    table = CommunityTable.singletons(level)

    if m == 0:
        logger.info(
            "Symbol graph has no edges (%d nodes), returning singleton partition",
            len(level.order),
        )
        return _build_partition(
            level, table, m, resolution, min_community_size,
            iterations=0, levels=0, converged=True, initial=0.0,
        )

    initial = _table_modularity(table, m, resolution)
    total_iterations = 0
    levels_run = 0
    converged = True

    while True:
        moved, iterations, level_converged = _local_moves(
            level, table, m, resolution, min_gain, max_iterations,
        )
        total_iterations += iterations
        levels_run += 1
        converged = converged and level_converged

        if not moved or levels_run >= max_levels:
            break

        level = _aggregate(level, table)
        table = CommunityTable.singletons(level)

    partition = _build_partition(
        level, table, m, resolution, min_community_size,
        iterations=total_iterations, levels=levels_run,
        converged=converged, initial=initial,
    )

    logger.info(
        "Louvain: %d nodes -> %d communities (%d emitted, %d unassigned), "
        "modularity %.4f -> %.4f in %d passes over %d level(s)%s",
        len(partition.membership),
        len(set(partition.membership.values())),
        partition.total_communities,
        len(partition.unassigned),
        initial,
        partition.modularity,
        total_iterations,
        levels_run,
        "" if converged else " (iteration cap reached)",
    )
    return partition


def modularity(
    graph: nx.Graph,
    membership: Mapping[int, int],
    resolution: float = DEFAULT_RESOLUTION,
) -> float:
    """Modularity of ``membership`` on ``graph``.

    Nodes missing from ``membership`` count as singletons. Self-loops are
    ignored. A graph without edges has modularity 0.
    """
    level = _initial_level(graph)
    m = sum(sum(nbrs.values()) for nbrs in level.adjacency.values()) // 2
    if m == 0:
        return 0.0

    internal: dict[object, int] = {}
    total: dict[object, int] = {}
    for node in level.order:
        community = membership.get(node, ("singleton", node))
        total[community] = total.get(community, 0) + level.degree[node]
        internal.setdefault(community, 0)
        for neighbor, weight in level.adjacency[node].items():
            if membership.get(neighbor, ("singleton", neighbor)) == community:
                internal[community] += weight

    two_m = 2.0 * m
    return sum(
        internal[c] / two_m - resolution * (total[c] / two_m) ** 2
        for c in total
    )


def _initial_level(graph: nx.Graph) -> _LevelGraph:
    """Build level-0 working graph; self-loops are ignored."""
    order = sorted(graph.nodes)
    adjacency: dict[int, dict[int, int]] = {node: {} for node in order}
    for u, v, data in graph.edges(data=True):
        if u == v:
            continue
        weight = int(data.get("weight", 1))
        adjacency[u][v] = adjacency[u].get(v, 0) + weight
        adjacency[v][u] = adjacency[v].get(u, 0) + weight

    return _LevelGraph(
        order=order,
        adjacency=adjacency,
        degree={node: sum(adjacency[node].values()) for node in order},
        self_weight={node: 0 for node in order},
        members={node: [node] for node in order},
        symbol_adjacency=adjacency,
    )


def _gain(links_in: int, sigma_tot: int, degree: int, m: int, resolution: float) -> float:
    """Modularity gain of inserting an isolated node into a community.

    Closed form of
    [(Sin + 2k_in)/2m - ((Stot + k)/2m)^2] - [Sin/2m - (Stot/2m)^2 - (k/2m)^2]
    with the null-model terms scaled by ``resolution``.
    """
    return links_in / m - resolution * sigma_tot * degree / (2.0 * m * m)


def _local_moves(
    level: _LevelGraph,
    table: CommunityTable,
    m: int,
    resolution: float,
    min_gain: float,
    max_iterations: int,
) -> tuple[bool, int, bool]:
    """Run local-move passes in place.

    Returns:
        (any node moved, passes executed, reached a fixed point)
    """
    moved_any = False
    iterations = 0

    while iterations < max_iterations:
        iterations += 1
        moves = 0

        for node in level.order:
            degree = level.degree[node]
            self_weight = level.self_weight[node]
            links = _community_links(level, table, node)
            current = table.assignment[node]

            table.remove(node, links.get(current, 0), degree, self_weight)
            stay_gain = _gain(links.get(current, 0), table.total[current], degree, m, resolution)

            best_community = current
            best_net = 0.0
            for community in sorted(links):
                if community == current:
                    continue
                net = _gain(links[community], table.total[community], degree, m, resolution) - stay_gain
                if net > best_net:
                    best_community = community
                    best_net = net

            if best_community != current and best_net > min_gain:
                table.insert(node, best_community, links[best_community], degree, self_weight)
                table.drop_if_empty(current)
                moves += 1
                logger.debug(
                    "Moved node %d: community %d -> %d (gain %.6f)",
                    node, current, best_community, best_net,
                )
            else:
                table.insert(node, current, links.get(current, 0), degree, self_weight)

        if moves == 0:
            return moved_any, iterations, True
        moved_any = True

    return moved_any, iterations, False


def _community_links(level: _LevelGraph, table: CommunityTable, node: int) -> dict[int, int]:
    """Weight from ``node`` to each neighboring community, itself excluded."""
    links: dict[int, int] = {}
    for neighbor, weight in level.adjacency[node].items():
        community = table.assignment[neighbor]
        links[community] = links.get(community, 0) + weight
    return links


def _aggregate(level: _LevelGraph, table: CommunityTable) -> _LevelGraph:
    """Collapse each community into a super-node.

    Super-nodes are numbered by ascending smallest original member, so the
    next level keeps the ascending-id visiting contract.
    """
    communities = sorted(
        table.nodes,
        key=lambda c: min(s for n in table.nodes[c] for s in level.members[n]),
    )
    renumber = {community: index for index, community in enumerate(communities)}

    adjacency: dict[int, dict[int, int]] = {i: {} for i in renumber.values()}
    for node in level.order:
        source = renumber[table.assignment[node]]
        for neighbor, weight in level.adjacency[node].items():
            target = renumber[table.assignment[neighbor]]
            if source != target:
                adjacency[source][target] = adjacency[source].get(target, 0) + weight

    members: dict[int, list[int]] = {}
    for community, index in renumber.items():
        members[index] = sorted(s for n in table.nodes[community] for s in level.members[n])

    order = sorted(adjacency)
    return _LevelGraph(
        order=order,
        adjacency=adjacency,
        degree={i: table.total[c] for c, i in renumber.items()},
        self_weight={i: table.internal[c] for c, i in renumber.items()},
        members=members,
        symbol_adjacency=level.symbol_adjacency,
    )


def _table_modularity(table: CommunityTable, m: int, resolution: float) -> float:
    two_m = 2.0 * m
    return sum(
        table.internal[c] / two_m - resolution * (table.total[c] / two_m) ** 2
        for c in table.nodes
    )


def _build_partition(
    level: _LevelGraph,
    table: CommunityTable,
    m: int,
    resolution: float,
    min_community_size: int,
    iterations: int,
    levels: int,
    converged: bool,
    initial: float,
) -> CommunityPartition:
    """Translate the final table into symbol-level communities.

    Community ids are assigned by ascending smallest member symbol.
    """
    groups: list[tuple[list[int], int]] = []
    for community, nodes in table.nodes.items():
        symbols = sorted(s for n in nodes for s in level.members[n])
        groups.append((symbols, community))
    groups.sort(key=lambda g: g[0][0])

    membership: dict[int, int] = {}
    communities: list[Community] = []
    unassigned: list[int] = []

    for community_id, (symbols, community) in enumerate(groups):
        for symbol in symbols:
            membership[symbol] = community_id
        if len(symbols) < min_community_size:
            unassigned.extend(symbols)
            continue
        internal = table.internal[community]
        communities.append(Community(
            community_id=community_id,
            members=symbols,
            internal_weight=internal,
            total_degree=table.total[community],
            cohesion=compute_cohesion(level.symbol_adjacency, symbols, internal),
        ))

    return CommunityPartition(
        membership=dict(sorted(membership.items())),
        communities=communities,
        unassigned=sorted(unassigned),
        modularity=_table_modularity(table, m, resolution) if m else 0.0,
        initial_modularity=initial,
        iterations=iterations,
        levels=levels,
        converged=converged,
        resolution=resolution,
        total_weight=m,
    )


def compute_cohesion(
    adjacency: Mapping[int, Mapping[int, int]],
    members: list[int],
    internal_weight: int,
) -> dict[int, float]:
    """Per-member cohesion in [0, 1].

    Ratio of a member's weight to fellow members over the community's
    average internal degree. A single-member community scores 1.0 when the
    member is isolated and 0.0 when it has any external edge.
    """
    if len(members) == 1:
        only = members[0]
        return {only: 0.0 if adjacency.get(only) else 1.0}

    average = internal_weight / len(members)
    member_set = set(members)
    cohesion: dict[int, float] = {}
    for member in members:
        if average <= 0:
            cohesion[member] = 0.0
            continue
        inside = sum(
            weight for neighbor, weight in adjacency.get(member, {}).items()
            if neighbor in member_set
        )
        cohesion[member] = round(min(1.0, inside / average), 4)
    return cohesion
