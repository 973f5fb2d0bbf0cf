"""Read and write flow documents in the React Flow node/edge shape.

A document is ``{"nodes": [...], "edges": [...], ...}``. Node records carry
``id``, ``type``, ``position``, and optionally ``width``/``height`` and
``measured``; ``type == "noteNode"`` marks an annotation that is never laid
out. Everything else in a record is preserved as-is.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from flowlayout.config import LayoutConfig
from flowlayout.delegate import LayoutDelegate
from flowlayout.engine import layout_nodes
from flowlayout.errors import FlowFormatError
from flowlayout.types import Edge, Node, NodeKind, Position, Size

NOTE_TYPE = "noteNode"


def node_from_flow(record: Mapping[str, Any]) -> Node:
    if "id" not in record:
        raise FlowFormatError(record, "id")

    position = record.get("position") or {}
    measured = record.get("measured")
    return Node(
        id=str(record["id"]),
        position=Position(x=position.get("x", 0), y=position.get("y", 0)),
        kind=NodeKind.NOTE if record.get("type") == NOTE_TYPE else NodeKind.DEFAULT,
        width=record.get("width"),
        height=record.get("height"),
        measured=Size(width=measured.get("width"), height=measured.get("height")) if measured else None,
        data=record,
    )


def edge_from_flow(record: Mapping[str, Any]) -> Edge:
    for key in ("source", "target"):
        if key not in record:
            raise FlowFormatError(record, key)
    source, target = str(record["source"]), str(record["target"])
    return Edge(id=str(record.get("id", f"{source}->{target}")), source=source, target=target)


def node_to_flow(node: Node) -> dict[str, Any]:
    """Deep copy of the node's original record with ``position`` replaced."""
    record = copy.deepcopy(dict(node.data))
    record["position"] = {"x": node.position.x, "y": node.position.y}
    return record


async def layout_flow(
    flow: Mapping[str, Any],
    config: LayoutConfig | None = None,
    delegate: LayoutDelegate | None = None,
) -> dict[str, Any]:
    """Lay out a flow document and return a new document.

    Nodes keep their document order; keys other than ``nodes`` are copied.
    Notes and repeated ids after the first keep their own position.
    """
    nodes = [node_from_flow(r) for r in flow.get("nodes", [])]
    edges = [edge_from_flow(r) for r in flow.get("edges", [])]

    laid_out = await layout_nodes(nodes, edges, config, delegate)
    # Pass-through copies come after the laid-out nodes, so the first hit wins.
    positions: dict[str, Position] = {}
    for node in laid_out:
        if not node.is_pass_through:
            positions.setdefault(node.id, node.position)

    placed: list[Node] = []
    seen: set[str] = set()
    for node in nodes:
        if node.is_pass_through or node.id in seen:
            placed.append(node)
            continue
        seen.add(node.id)
        pos = positions[node.id]
        placed.append(node.with_position(pos.x, pos.y))

    result = {key: copy.deepcopy(value) for key, value in flow.items() if key != "nodes"}
    result["nodes"] = [node_to_flow(n) for n in placed]
    return result
