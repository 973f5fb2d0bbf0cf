"""Layout pipeline: partition → lay out each group → resolve → composite.

The engine holds no state between calls. Nodes are never modified in place;
the returned list is the only result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence

from flowlayout.adapter import GroupLayout, build_request, layout_group, stacked_placement
from flowlayout.compositor import compose
from flowlayout.config import ErrorPolicy, LayoutConfig
from flowlayout.delegate import LayoutDelegate, SugiyamaDelegate
from flowlayout.errors import DelegateError
from flowlayout.partition import Group, partition
from flowlayout.resolver import resolve
from flowlayout.types import Edge, Node

logger = logging.getLogger(__name__)


async def layout_nodes(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    config: LayoutConfig | None = None,
    delegate: LayoutDelegate | None = None,
) -> list[Node]:
    """Compute a position for every node of a flow.

    Args:
        nodes: Flow nodes. NOTE nodes are returned with their position unchanged.
        edges: Directed edges. Edges with unknown endpoints are ignored.
        config: Layout options; defaults to ``LayoutConfig()``.
        delegate: Layered-layout delegate; defaults to ``SugiyamaDelegate()``.

    Returns:
        Every input node exactly once, with its final position.

    Raises:
        DelegateError: The delegate failed for a group and the policy is RAISE.
    """
    config = config or LayoutConfig()
    delegate = delegate or SugiyamaDelegate()
    nodes = list(nodes)
    edges = list(edges)

    nodes_by_id: dict[str, Node] = {}
    untouched: list[Node] = []
    for node in nodes:
        # Repeated ids are a caller error; later copies are passed through as-is.
        if node.is_pass_through or node.id in nodes_by_id:
            untouched.append(node)
        else:
            nodes_by_id[node.id] = node

    groups = partition(nodes, edges)
    edges_by_group = _edges_by_group(groups, edges)

    def job(index: int) -> Awaitable[GroupLayout]:
        return _layout_one(index, groups[index], edges_by_group[index], nodes_by_id, delegate, config)

    if config.concurrent:
        outcomes = await asyncio.gather(*(job(i) for i in range(len(groups))), return_exceptions=True)
        # Report the lowest failing group, whichever finished first.
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        layouts = list(outcomes)
    else:
        layouts = [await job(i) for i in range(len(groups))]

    # gather keeps submission order, so offsets follow partition order.
    resolved = [
        resolve(
            layout.positions,
            nodes_by_id,
            config.spacing,
            unplaced=[nodes_by_id[nid] for nid in layout.missing],
        )
        for layout in layouts
    ]
    return compose(resolved, untouched, config.spacing)


def layout_nodes_sync(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    config: LayoutConfig | None = None,
    delegate: LayoutDelegate | None = None,
) -> list[Node]:
    """Blocking wrapper around :func:`layout_nodes` for callers without a loop."""
    return asyncio.run(layout_nodes(nodes, edges, config, delegate))


def _edges_by_group(groups: Sequence[Group], edges: Iterable[Edge]) -> list[list[Edge]]:
    owner: dict[str, int] = {}
    for index, group in enumerate(groups):
        for node_id in group.node_ids:
            owner[node_id] = index

    result: list[list[Edge]] = [[] for _ in groups]
    for edge in edges:
        index = owner.get(edge.source)
        if index is not None and owner.get(edge.target) == index:
            result[index].append(edge)
    return result


async def _layout_one(
    index: int,
    group: Group,
    edges: list[Edge],
    nodes_by_id: dict[str, Node],
    delegate: LayoutDelegate,
    config: LayoutConfig,
) -> GroupLayout:
    """Lay out one group, applying the configured delegate failure policy."""
    group_nodes = [nodes_by_id[nid] for nid in group.node_ids]
    try:
        return await layout_group(group_nodes, edges, group.is_orphan, delegate, config)
    except Exception as exc:
        if config.on_delegate_error is ErrorPolicy.RAISE:
            raise DelegateError(index, list(group.node_ids)) from exc
        logger.warning(f"Layout delegate failed for group {index} ({len(group)} nodes), stacking instead: {exc!r}")
        request = build_request(group_nodes, edges, group.is_orphan, config)
        return GroupLayout(positions=stacked_placement(request))
