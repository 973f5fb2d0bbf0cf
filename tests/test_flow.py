"""Tests for flow.py — React Flow style documents in and out."""

from __future__ import annotations

import copy

import pytest

from flowlayout.config import LayoutConfig
from flowlayout.errors import FlowFormatError
from flowlayout.flow import NOTE_TYPE, edge_from_flow, layout_flow, node_from_flow, node_to_flow
from flowlayout.types import NodeKind, Position, Size

DOCUMENT = {
    "nodes": [
        {
            "id": "A",
            "type": "genericNode",
            "position": {"x": 0, "y": 0},
            "measured": {"width": 100, "height": 50},
            "data": {"label": "Input"},
        },
        {"id": "B", "type": "genericNode", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
        {"id": "memo", "type": NOTE_TYPE, "position": {"x": 300, "y": -40}, "data": {"text": "hi"}},
    ],
    "edges": [{"id": "e1", "source": "A", "target": "B"}],
    "viewport": {"x": 0, "y": 0, "zoom": 1},
}


class TestNodeFromFlow:
    def test_sizes_and_kind(self):
        """Explicit, measured and type fields map onto Node."""
        node = node_from_flow(DOCUMENT["nodes"][0])
        assert node.id == "A"
        assert node.measured == Size(100, 50)
        assert node.width is None
        assert node.kind is NodeKind.DEFAULT

    def test_note_type(self):
        """noteNode records are pass-through nodes."""
        node = node_from_flow(DOCUMENT["nodes"][2])
        assert node.kind is NodeKind.NOTE
        assert node.position == Position(300, -40)

    def test_missing_position_defaults_to_origin(self):
        assert node_from_flow({"id": "A"}).position == Position(0, 0)

    def test_missing_id(self):
        """A record without an id is rejected."""
        with pytest.raises(FlowFormatError, match="'id'"):
            node_from_flow({"type": "genericNode"})


class TestEdgeFromFlow:
    def test_fields(self):
        edge = edge_from_flow({"id": "e1", "source": "A", "target": "B"})
        assert (edge.id, edge.source, edge.target) == ("e1", "A", "B")

    def test_generated_id(self):
        """An edge without an id gets one from its endpoints."""
        assert edge_from_flow({"source": "A", "target": "B"}).id == "A->B"

    def test_missing_target(self):
        with pytest.raises(FlowFormatError) as excinfo:
            edge_from_flow({"source": "A"})
        assert excinfo.value.missing == "target"


class TestNodeToFlow:
    def test_only_position_replaced(self):
        """All other keys survive; the output is a copy."""
        record = DOCUMENT["nodes"][0]
        out = node_to_flow(node_from_flow(record).with_position(140, 0))
        assert out["position"] == {"x": 140, "y": 0}
        assert out["data"] == {"label": "Input"}
        assert out["data"] is not record["data"]
        assert record["position"] == {"x": 0, "y": 0}


class TestLayoutFlow:
    @pytest.mark.asyncio
    async def test_positions_assigned(self):
        """B lands to the right of A; the note stays where it was."""
        original = copy.deepcopy(DOCUMENT)
        result = await layout_flow(DOCUMENT, LayoutConfig(spacing=20))
        nodes = {n["id"]: n for n in result["nodes"]}
        assert nodes["A"]["position"] == {"x": 0, "y": 0}
        assert nodes["B"]["position"]["x"] >= 100
        assert nodes["memo"]["position"] == {"x": 300, "y": -40}
        assert DOCUMENT == original

    @pytest.mark.asyncio
    async def test_document_order_and_extra_keys(self):
        """Node order follows the document; other top-level keys are copied."""
        result = await layout_flow(DOCUMENT)
        assert [n["id"] for n in result["nodes"]] == ["A", "B", "memo"]
        assert result["edges"] == DOCUMENT["edges"]
        assert result["viewport"] == DOCUMENT["viewport"]

    @pytest.mark.asyncio
    async def test_empty_document(self):
        result = await layout_flow({})
        assert result == {"nodes": []}

    @pytest.mark.asyncio
    async def test_repeated_id_keeps_own_position(self):
        """Only the first record with an id is laid out; a later copy keeps its position."""
        document = {
            "nodes": [
                {"id": "A", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
                {"id": "A", "position": {"x": 77, "y": 88}, "width": 100, "height": 50},
            ]
        }
        result = await layout_flow(document, LayoutConfig(spacing=20))
        assert [n["position"] for n in result["nodes"]] == [{"x": 0, "y": 0}, {"x": 77, "y": 88}]
