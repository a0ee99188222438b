# src/graph/interaction_validator.py — v1
"""Deterministic checks on inferred module interactions.

Inferred interactions (source ``llm-inferred``) are checked against the
AST-derived interactions and the module import graph:

  - REVERSED: an AST interaction exists in the opposite direction.
  - DIRECTION_CONFUSED: no forward import, but a reverse import exists.
  - NO_IMPORTS: no import in either direction.

Import evidence is only required inside a process group. Modules in
different process groups talk through runtime protocols, so a missing
import there is expected and never reported.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from archinfer.core.models import Interaction, InteractionIssue, ModuleImportEdge
from archinfer.graph.process_groups import ProcessGroups, are_same_process

logger = logging.getLogger(__name__)


def validate_inferred_interactions(
    interactions: Iterable[Interaction],
    module_imports: Iterable[ModuleImportEdge],
    groups: ProcessGroups | None = None,
) -> list[InteractionIssue]:
    """Return issues found on ``llm-inferred`` interactions.

    Args:
        interactions: All interactions, AST-derived ones included.
        module_imports: Module-level import edges (any kind).
        groups: Process groups; None treats every pair as same-process.

    Returns:
        Issues in interaction id order.
    """
    interactions = sorted(interactions, key=lambda i: i.id)
    ast_pairs = {
        (i.from_module_id, i.to_module_id) for i in interactions if i.source == "ast"
    }
    import_pairs = {(e.from_module_id, e.to_module_id) for e in module_imports}

    issues: list[InteractionIssue] = []
    checked = 0

    for interaction in interactions:
        if interaction.source != "llm-inferred":
            continue
        checked += 1
        forward = (interaction.from_module_id, interaction.to_module_id)
        reverse = (interaction.to_module_id, interaction.from_module_id)

        if reverse in ast_pairs:
            issues.append(_issue(
                interaction, "REVERSED",
                f"AST interaction exists in reverse direction "
                f"({interaction.to_path} -> {interaction.from_path})",
            ))
            continue

        if groups is not None and not are_same_process(*forward, groups):
            continue

        if forward in import_pairs:
            continue

        if reverse in import_pairs:
            issues.append(_issue(
                interaction, "DIRECTION_CONFUSED",
                f"No forward imports, but reverse imports exist "
                f"({interaction.to_path} imports from {interaction.from_path})",
            ))
        else:
            issues.append(_issue(
                interaction, "NO_IMPORTS",
                "No import path exists in either direction between these modules",
            ))

    logger.info(
        "Validated %d inferred interactions: %d issues", checked, len(issues),
    )
    return issues


def _issue(interaction: Interaction, kind: str, message: str) -> InteractionIssue:
    return InteractionIssue(
        interaction_id=interaction.id,
        from_module_id=interaction.from_module_id,
        to_module_id=interaction.to_module_id,
        from_path=interaction.from_path,
        to_path=interaction.to_path,
        kind=kind,  # type: ignore[arg-type]
        issue=f"{kind}: {message}",
    )
