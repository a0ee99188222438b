# src/graph/layers/community_integrator.py — v2
"""Community integrator — turn a community partition into flat modules.

Creates one root module plus one child module per emitted community,
and a membership row (with cohesion) for every assigned symbol.
The tree is flat here; naming and nesting happen in a later labeling step.
"""

from __future__ import annotations

import logging

from archinfer.core.models import Module, ModuleMembership
from archinfer.graph.layers.models import CommunityPartition

logger = logging.getLogger(__name__)

ROOT_MODULE_ID = 1
DEFAULT_ROOT_PATH = "project"


def build_modules(
    partition: CommunityPartition,
    root_path: str = DEFAULT_ROOT_PATH,
) -> tuple[list[Module], list[ModuleMembership]]:
    """Create flat modules and memberships from emitted communities.

    Module ids start after the root (``ROOT_MODULE_ID``) in community
    order. Unassigned symbols get no membership row.

    Args:
        partition: Result of community detection.
        root_path: Dotted path of the root module.

    Returns:
        (modules including the root, memberships)
    """
    root = Module(id=ROOT_MODULE_ID, parent_id=None, full_path=root_path, depth=0)
    modules: list[Module] = [root]
    memberships: list[ModuleMembership] = []

    for offset, community in enumerate(partition.communities, start=1):
        module_id = ROOT_MODULE_ID + offset
        modules.append(Module(
            id=module_id,
            parent_id=root.id,
            full_path=f"{root_path}.community-{community.community_id}",
            depth=1,
            members=list(community.members),
        ))
        for symbol in community.members:
            memberships.append(ModuleMembership(
                symbol_id=symbol,
                module_id=module_id,
                cohesion=community.cohesion.get(symbol, 0.0),
            ))

    logger.info(
        "Built %d modules with %d members (%d symbols left unassigned)",
        len(modules) - 1,
        len(memberships),
        len(partition.unassigned),
    )
    return modules, memberships


def membership_map(memberships: list[ModuleMembership]) -> dict[int, int]:
    """Index memberships as ``symbol_id -> module_id``."""
    return {m.symbol_id: m.module_id for m in memberships}
