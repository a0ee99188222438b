# tests/unit/graph/layers/test_models.py — v2
"""Tests for graph/layers/models.py — Community, CommunityPartition."""

from __future__ import annotations

from archinfer.graph.layers.models import Community, CommunityPartition


def _make_community(cid: int, members: list[int]) -> Community:
    return Community(community_id=cid, members=members, internal_weight=2, total_degree=4)


class TestCommunity:
    def test_size(self):
        assert _make_community(0, [1, 2, 3]).size == 3

    def test_defaults(self):
        c = Community(community_id=7)
        assert c.members == []
        assert c.cohesion == {}
        assert c.internal_weight == 0


class TestCommunityPartition:
    def test_defaults(self):
        p = CommunityPartition()
        assert p.total_communities == 0
        assert p.converged is True
        assert p.resolution == 1.0

    def test_community_of(self):
        p = CommunityPartition(
            membership={1: 0, 2: 0, 3: 0, 9: 1},
            communities=[_make_community(0, [1, 2, 3])],
            unassigned=[9],
        )
        assert p.community_of(2).community_id == 0
        assert p.community_of(9) is None
        assert p.community_of(42) is None

    def test_json_round_trip_keeps_int_keys(self):
        p = CommunityPartition(membership={5: 0, 6: 0}, communities=[_make_community(0, [5, 6])])
        restored = CommunityPartition.model_validate_json(p.model_dump_json())
        assert restored.membership == {5: 0, 6: 0}
        assert restored.total_communities == 1
