# src/graph/layers/layer_classifier.py — v2
"""Layer classifier — assigns a ModuleLayer to each module.

Pure function: reads member role/domain annotations, returns a mapping,
does NOT modify the modules. Free-form annotation strings are resolved
through an explicit lookup table; anything not in the table is ignored.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from archinfer.core.models import Module, ModuleLayer

logger = logging.getLogger(__name__)

LAYER_LOOKUP: dict[str, ModuleLayer] = {
    # controller
    "controller": ModuleLayer.CONTROLLER,
    "handler": ModuleLayer.CONTROLLER,
    "route": ModuleLayer.CONTROLLER,
    "router": ModuleLayer.CONTROLLER,
    "endpoint": ModuleLayer.CONTROLLER,
    "view": ModuleLayer.CONTROLLER,
    "resolver": ModuleLayer.CONTROLLER,
    "cli": ModuleLayer.CONTROLLER,
    "command": ModuleLayer.CONTROLLER,
    # service
    "service": ModuleLayer.SERVICE,
    "use-case": ModuleLayer.SERVICE,
    "usecase": ModuleLayer.SERVICE,
    "business-logic": ModuleLayer.SERVICE,
    "domain": ModuleLayer.SERVICE,
    "manager": ModuleLayer.SERVICE,
    "orchestrator": ModuleLayer.SERVICE,
    # repository
    "repository": ModuleLayer.REPOSITORY,
    "repo": ModuleLayer.REPOSITORY,
    "dao": ModuleLayer.REPOSITORY,
    "persistence": ModuleLayer.REPOSITORY,
    "data-access": ModuleLayer.REPOSITORY,
    "model": ModuleLayer.REPOSITORY,
    "schema": ModuleLayer.REPOSITORY,
    # adapter
    "adapter": ModuleLayer.ADAPTER,
    "client": ModuleLayer.ADAPTER,
    "gateway": ModuleLayer.ADAPTER,
    "integration": ModuleLayer.ADAPTER,
    "connector": ModuleLayer.ADAPTER,
    "api-client": ModuleLayer.ADAPTER,
    # utility
    "utility": ModuleLayer.UTILITY,
    "util": ModuleLayer.UTILITY,
    "utils": ModuleLayer.UTILITY,
    "helper": ModuleLayer.UTILITY,
    "helpers": ModuleLayer.UTILITY,
    "shared": ModuleLayer.UTILITY,
    "common": ModuleLayer.UTILITY,
    "config": ModuleLayer.UTILITY,
}

_LAYER_ORDER = list(ModuleLayer)


def lookup_layer(annotation: str | None) -> ModuleLayer:
    """Resolve one role/domain string, UNKNOWN when not in the table."""
    if not annotation:
        return ModuleLayer.UNKNOWN
    key = annotation.strip().lower().replace("_", "-").replace(" ", "-")
    return LAYER_LOOKUP.get(key, ModuleLayer.UNKNOWN)


def infer_layer(annotations: Iterable[str | None]) -> ModuleLayer:
    """Majority layer over member annotations.

    UNKNOWN votes are ignored; ties go to the layer declared first in
    ModuleLayer.
    """
    votes = Counter(
        layer for layer in (lookup_layer(a) for a in annotations)
        if layer is not ModuleLayer.UNKNOWN
    )
    if not votes:
        return ModuleLayer.UNKNOWN
    best = max(votes.values())
    return next(layer for layer in _LAYER_ORDER if votes.get(layer) == best)


def classify_layers(
    modules: Iterable[Module],
    symbol_roles: Mapping[int, list[str]],
) -> dict[int, ModuleLayer]:
    """Assign a layer to each module from its members' annotations.

    Args:
        modules: Modules with populated ``members``.
        symbol_roles: Mapping ``symbol_id -> [role/domain strings]``.

    Returns:
        Mapping ``module_id -> ModuleLayer``.
    """
    layers: dict[int, ModuleLayer] = {}
    for module in modules:
        annotations = [
            role for symbol in module.members for role in symbol_roles.get(symbol, [])
        ]
        layers[module.id] = infer_layer(annotations)

    counts = Counter(layers.values())
    logger.info(
        "Layer classification: %s",
        ", ".join(f"{layer.value}={counts[layer]}" for layer in _LAYER_ORDER if counts[layer]),
    )
    return layers


def apply_layers(modules: list[Module], layers: Mapping[int, ModuleLayer]) -> list[Module]:
    """Return copies of ``modules`` with their ``layer`` set."""
    return [
        m.model_copy(update={"layer": layers.get(m.id, m.layer)}) for m in modules
    ]
