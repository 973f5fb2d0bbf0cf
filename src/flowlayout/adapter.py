"""Group layout adapter — turn one group into a delegate request and run it."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from flowlayout.config import LayoutConfig
from flowlayout.delegate import DelegateEdge, DelegateNode, Direction, LayoutDelegate, LayoutRequest
from flowlayout.types import Edge, Node, RawPosition, Size

logger = logging.getLogger(__name__)

CHAIN_PREFIX = "__chain_"


@dataclass
class GroupLayout:
    """Raw delegate output for one group.

    ``missing`` lists requested ids the delegate returned no coordinate for.
    """

    positions: list[RawPosition] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def resolve_size(node: Node, config: LayoutConfig) -> Size:
    """Explicit size, then measured size, then the configured default.

    Each dimension falls back on its own; zero counts as missing.
    """
    measured = node.measured
    width = node.width or (measured.width if measured else None) or config.default_width
    height = node.height or (measured.height if measured else None) or config.default_height
    return Size(width=width, height=height)


def linear_chain_hint(node_ids: Sequence[str]) -> list[DelegateEdge]:
    """Placeholder edges node₀→node₁→node₂… for a group that has no edges.

    A layered algorithm has nothing to rank unconnected nodes by; chaining
    them gives it a linear arrangement to produce. These edges exist only in
    the delegate request and are never returned to callers.
    """
    return [
        DelegateEdge(id=f"{CHAIN_PREFIX}{i}", source=src, target=tgt)
        for i, (src, tgt) in enumerate(zip(node_ids, node_ids[1:]))
    ]


def build_request(
    nodes: Sequence[Node],
    edges: Iterable[Edge],
    is_orphan_group: bool,
    config: LayoutConfig,
) -> LayoutRequest:
    """Build the delegate request for one group.

    Only edges with both endpoints in the group are forwarded. Orphan groups
    are chained with :func:`linear_chain_hint` and ask for half spacing.
    """
    delegate_nodes: list[DelegateNode] = []
    seen: set[str] = set()
    for node in nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        size = resolve_size(node, config)
        delegate_nodes.append(DelegateNode(id=node.id, width=size.width, height=size.height))

    if is_orphan_group:
        delegate_edges = linear_chain_hint([n.id for n in delegate_nodes])
        scale = 0.5
    else:
        delegate_edges = [
            DelegateEdge(id=e.id, source=e.source, target=e.target)
            for e in edges
            if e.source in seen and e.target in seen
        ]
        scale = 1.0

    return LayoutRequest(
        nodes=delegate_nodes,
        edges=delegate_edges,
        direction=Direction.RIGHT,
        node_spacing=config.spacing * scale,
        layer_spacing=config.group_gap * scale,
    )


def stacked_placement(request: LayoutRequest) -> list[RawPosition]:
    """Naive fallback: every node in one column, in request order."""
    return [
        RawPosition(id=n.id, x=0, y=float(i), width=n.width, height=n.height)
        for i, n in enumerate(request.nodes)
    ]


async def layout_group(
    nodes: Sequence[Node],
    edges: Iterable[Edge],
    is_orphan_group: bool,
    delegate: LayoutDelegate,
    config: LayoutConfig,
) -> GroupLayout:
    """Run the delegate once for a group and collect its raw coordinates.

    Delegate exceptions propagate; the engine applies the failure policy.
    Positions for ids that were not requested are discarded.
    """
    request = build_request(nodes, edges, is_orphan_group, config)
    if not request.nodes:
        return GroupLayout()

    logger.debug(
        f"Laying out {'orphan ' if is_orphan_group else ''}group of {len(request.nodes)} nodes, "
        f"{len(request.edges)} edges"
    )
    raw = await delegate.layout(request)
    return collect_positions(request, raw)


def collect_positions(request: LayoutRequest, raw: Iterable[RawPosition]) -> GroupLayout:
    """Match delegate output to the request, keeping request order.

    Only x and y are taken from the delegate; sizes are the requested ones.
    """
    by_id: dict[str, RawPosition] = {}
    for pos in raw:
        by_id.setdefault(pos.id, pos)

    result = GroupLayout()
    for node in request.nodes:
        pos = by_id.get(node.id)
        if pos is None:
            result.missing.append(node.id)
        else:
            result.positions.append(RawPosition(id=node.id, x=pos.x, y=pos.y, width=node.width, height=node.height))

    if result.missing:
        logger.debug(f"Delegate returned no coordinate for {len(result.missing)} nodes: {result.missing}")
    return result
