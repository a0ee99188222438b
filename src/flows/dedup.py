# src/flows/dedup.py — v1
"""Flow deduplicator — collapse redundant flow candidates.

Two passes, both restricted to flows of the same tier:
  1. Identical-set pass: flows with equal tier, action type, target entity
     and interaction set are true duplicates; one survives.
  2. Overlap pass: flows whose interaction sets overlap by at least the
     threshold (intersection over the LARGER set) are redundant; the less
     preferred one is dropped.

Preference, first deciding rule wins:
  a. specific (action type AND target entity) over catch-all;
  b. more definition steps;
  c. fewer interactions (more focused);
  d. higher tier (only reachable through pick_flow_to_drop).
Two specific flows with different (action type, target entity) describe
different operations and are never redundant, whatever their overlap.
Flows without interactions are incomparable and always survive.

Flows are ranked by preference before comparison, so the surviving set
does not depend on input order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from archinfer.core.models import FlowCandidate

logger = logging.getLogger(__name__)

DEFAULT_MIN_OVERLAP_RATIO = 0.5


def interaction_overlap_ratio(a: FlowCandidate, b: FlowCandidate) -> float:
    """``|A & B| / max(|A|, |B|)``; 0.0 when either set is empty."""
    set_a = set(a.interaction_ids)
    set_b = set(b.interaction_ids)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / max(len(set_a), len(set_b))


def is_specific(flow: FlowCandidate) -> bool:
    return flow.action_type is not None and flow.target_entity is not None


def are_distinct_operations(a: FlowCandidate, b: FlowCandidate) -> bool:
    """Both specific, but about a different action or entity."""
    return (
        is_specific(a)
        and is_specific(b)
        and (a.action_type, a.target_entity) != (b.action_type, b.target_entity)
    )


def pick_flow_to_drop(
    a: FlowCandidate,
    b: FlowCandidate,
    idx_a: int,
    idx_b: int,
) -> int:
    """Decide which of two overlapping flows to drop; returns its index.

    When every rule ties, the later flow (``idx_b``) is dropped.
    """
    if is_specific(a) != is_specific(b):
        return idx_b if is_specific(a) else idx_a

    steps_a, steps_b = len(a.definition_steps), len(b.definition_steps)
    if steps_a != steps_b:
        return idx_b if steps_a > steps_b else idx_a

    size_a, size_b = len(set(a.interaction_ids)), len(set(b.interaction_ids))
    if size_a != size_b:
        return idx_b if size_a < size_b else idx_a

    if a.tier != b.tier:
        return idx_b if a.tier > b.tier else idx_a

    return idx_b


def dedup_by_interaction_overlap(
    flows: Sequence[FlowCandidate],
    threshold: float = DEFAULT_MIN_OVERLAP_RATIO,
) -> list[FlowCandidate]:
    """Drop same-tier flows whose interaction sets overlap >= ``threshold``.

    Returns:
        Surviving flows in their input order.
    """
    ranked = sorted(range(len(flows)), key=lambda i: _preference_key(flows[i]))
    kept: list[int] = []
    dropped: set[int] = set()

    for idx in ranked:
        flow = flows[idx]
        if not flow.interaction_ids:
            kept.append(idx)
            continue
        for other_idx in kept:
            other = flows[other_idx]
            if other.tier != flow.tier or not other.interaction_ids:
                continue
            if are_distinct_operations(flow, other):
                continue
            ratio = interaction_overlap_ratio(flow, other)
            if ratio >= threshold:
                dropped.add(idx)
                logger.debug(
                    "Dropping flow %r: overlaps %r (ratio %.2f)",
                    flow.slug or flow.name, other.slug or other.name, ratio,
                )
                break
        else:
            kept.append(idx)

    return [flow for idx, flow in enumerate(flows) if idx not in dropped]


def dedup_by_interaction_set(flows: Sequence[FlowCandidate]) -> list[FlowCandidate]:
    """Collapse true duplicates: same tier, action, entity and interaction set.

    Returns:
        Surviving flows in their input order.
    """
    best: dict[tuple, int] = {}
    for idx, flow in enumerate(flows):
        if not flow.interaction_ids:
            continue
        key = (flow.tier, flow.action_type, flow.target_entity, frozenset(flow.interaction_ids))
        current = best.get(key)
        if current is None or _preference_key(flow) < _preference_key(flows[current]):
            best[key] = idx

    survivors = set(best.values())
    return [
        flow for idx, flow in enumerate(flows)
        if not flow.interaction_ids or idx in survivors
    ]


class FlowDeduplicator:
    """Run both deduplication passes over a batch of flow candidates."""

    def __init__(self, min_overlap_ratio: float = DEFAULT_MIN_OVERLAP_RATIO) -> None:
        self._min_overlap_ratio = min_overlap_ratio

    def dedup(self, flows: Sequence[FlowCandidate]) -> list[FlowCandidate]:
        """Return the surviving flows, input order preserved."""
        after_set = dedup_by_interaction_set(flows)
        after_overlap = dedup_by_interaction_overlap(after_set, self._min_overlap_ratio)

        logger.info(
            "Flow dedup: %d candidates -> %d (%d identical, %d overlapping)",
            len(flows),
            len(after_overlap),
            len(flows) - len(after_set),
            len(after_set) - len(after_overlap),
        )
        return after_overlap


def _preference_key(flow: FlowCandidate) -> tuple:
    """Sort key, most preferred first; total over flow content."""
    return (
        0 if is_specific(flow) else 1,
        -len(flow.definition_steps),
        len(set(flow.interaction_ids)),
        -flow.tier,
        tuple(sorted(set(flow.interaction_ids))),
        flow.action_type or "",
        flow.target_entity or "",
        flow.name,
        flow.slug,
        flow.stakeholder,
        flow.description,
        tuple(
            (
                s.from_definition_id,
                s.to_definition_id,
                _optional_id(s.from_module_id),
                _optional_id(s.to_module_id),
            )
            for s in flow.definition_steps
        ),
        tuple(flow.interaction_ids),
    )


def _optional_id(value: int | None) -> tuple[bool, int]:
    return (value is None, value or 0)
