"""flowlayout — automatic left-to-right layout for node/edge flow diagrams.

Pipeline:
  1. Partition nodes into connected groups plus one orphan group
  2. Lay out each group with a layered-layout delegate
  3. Restack each x-rank so no two nodes overlap
  4. Stack groups vertically and merge pass-through (note) nodes
"""

from __future__ import annotations

from flowlayout.adapter import build_request, layout_group, linear_chain_hint, resolve_size, stacked_placement
from flowlayout.compositor import compose
from flowlayout.config import NODE_HEIGHT, NODE_SPACING, NODE_WIDTH, ErrorPolicy, LayoutConfig
from flowlayout.delegate import (
    DelegateEdge,
    DelegateNode,
    Direction,
    LayoutDelegate,
    LayoutRequest,
    SugiyamaDelegate,
)
from flowlayout.engine import layout_nodes, layout_nodes_sync
from flowlayout.errors import DelegateError, FlowFormatError, LayoutError
from flowlayout.flow import layout_flow
from flowlayout.partition import Group, partition
from flowlayout.resolver import resolve
from flowlayout.types import Edge, Node, NodeKind, Position, RawPosition, ResolvedGroup, Size

__all__ = [
    "NODE_HEIGHT",
    "NODE_SPACING",
    "NODE_WIDTH",
    "DelegateEdge",
    "DelegateError",
    "DelegateNode",
    "Direction",
    "Edge",
    "ErrorPolicy",
    "FlowFormatError",
    "Group",
    "LayoutConfig",
    "LayoutDelegate",
    "LayoutError",
    "LayoutRequest",
    "Node",
    "NodeKind",
    "Position",
    "RawPosition",
    "ResolvedGroup",
    "Size",
    "SugiyamaDelegate",
    "build_request",
    "compose",
    "layout_flow",
    "layout_group",
    "layout_nodes",
    "layout_nodes_sync",
    "linear_chain_hint",
    "partition",
    "resolve",
    "resolve_size",
    "stacked_placement",
]
