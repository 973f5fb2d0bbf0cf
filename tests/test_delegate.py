"""Tests for delegate.py — request serialization and the built-in delegate."""

from __future__ import annotations

import pytest

from flowlayout.delegate import (
    DelegateEdge,
    DelegateNode,
    Direction,
    LayoutDelegate,
    LayoutRequest,
    SugiyamaDelegate,
)


def make_request() -> LayoutRequest:
    return LayoutRequest(
        nodes=[DelegateNode("A", 100, 50), DelegateNode("B", 120, 60)],
        edges=[DelegateEdge("e1", "A", "B")],
        node_spacing=20,
        layer_spacing=40,
    )


class TestLayoutRequest:
    def test_node_ids(self):
        assert make_request().node_ids == ["A", "B"]

    def test_to_elk_graph(self):
        """ELK JSON carries layered options, sized children and edges."""
        graph = make_request().to_elk_graph()
        assert graph["id"] == "root"
        options = graph["layoutOptions"]
        assert options["elk.algorithm"] == "layered"
        assert options["elk.direction"] == "RIGHT"
        assert options["elk.spacing.nodeNode"] == "20"
        assert options["elk.layered.spacing.nodeNodeBetweenLayers"] == "40"
        assert graph["children"][1] == {
            "id": "B",
            "width": 120,
            "height": 60,
            "sourcePosition": "right",
            "targetPosition": "left",
            "labels": [{"text": "B"}],
        }
        assert graph["edges"] == [{"id": "e1", "sources": ["A"], "targets": ["B"]}]


class TestSugiyamaDelegate:
    def test_satisfies_protocol(self):
        assert isinstance(SugiyamaDelegate(), LayoutDelegate)

    @pytest.mark.asyncio
    async def test_layout(self):
        """A → B laid out left to right."""
        result = {p.id: p for p in await SugiyamaDelegate().layout(make_request())}
        assert result["A"].x == 0
        assert result["B"].x == 140

    @pytest.mark.asyncio
    async def test_down_direction(self):
        request = make_request()
        request.direction = Direction.DOWN
        result = {p.id: p for p in await SugiyamaDelegate().layout(request)}
        assert result["B"].y == 50 + 40
