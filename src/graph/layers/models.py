# src/graph/layers/models.py — v1
"""Community detection models: Community, CommunityPartition."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Community(BaseModel):
    """Module candidate produced by Louvain optimization.

    ``internal_weight`` is twice the summed weight of edges strictly inside
    the community; ``total_degree`` is the summed degree of its members,
    edges leaving the community included.
    """

    community_id: int
    members: list[int] = Field(default_factory=list)
    internal_weight: int = 0
    total_degree: int = 0
    cohesion: dict[int, float] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.members)


class CommunityPartition(BaseModel):
    """Result of one community detection run."""

    membership: dict[int, int] = Field(default_factory=dict)
    communities: list[Community] = Field(default_factory=list)
    unassigned: list[int] = Field(default_factory=list)
    modularity: float = 0.0
    initial_modularity: float = 0.0
    iterations: int = 0
    levels: int = 0
    converged: bool = True
    resolution: float = 1.0
    total_weight: int = 0

    @property
    def total_communities(self) -> int:
        return len(self.communities)

    def community_of(self, symbol_id: int) -> Community | None:
        """Emitted community containing ``symbol_id``, if any."""
        for community in self.communities:
            if symbol_id in community.members:
                return community
        return None
