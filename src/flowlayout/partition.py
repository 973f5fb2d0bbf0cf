"""Graph partitioning — split a flow into independently laid-out groups.

Nodes joined by at least one edge are grouped into connected components
(edge direction is ignored for connectivity). Every node with no incident
edge goes into a single trailing orphan group. Pass-through nodes and edges
that reference unknown or pass-through nodes are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import networkx as nx

from flowlayout.types import Edge, Node

logger = logging.getLogger(__name__)


@dataclass
class Group:
    """An ordered set of node ids laid out by one delegate call.

    ``node_ids`` follow the order the nodes appear in the caller's node list.
    """

    node_ids: list[str] = field(default_factory=list)
    is_orphan: bool = False

    def __len__(self) -> int:
        return len(self.node_ids)


def connectivity_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> nx.Graph:
    """Build the undirected connectivity graph over layout-eligible nodes.

    Dangling edges (an endpoint that is missing or is a pass-through node)
    are dropped rather than creating phantom nodes.
    """
    g: nx.Graph = nx.Graph()
    for node in nodes:
        if not node.is_pass_through:
            g.add_node(node.id)
    for edge in edges:
        if edge.source in g and edge.target in g:
            g.add_edge(edge.source, edge.target)
    return g


def partition(nodes: Sequence[Node], edges: Iterable[Edge]) -> list[Group]:
    """Partition nodes into connected groups plus one trailing orphan group.

    Connected groups are emitted in the order their first member appears in
    ``nodes``; the result does not depend on edge order. Traversal uses an
    explicit stack so deep chains cannot hit the recursion limit.
    """
    g = connectivity_graph(nodes, edges)

    # First occurrence wins if the caller passed a duplicated id.
    order: dict[str, int] = {}
    for node in nodes:
        if node.id in g and node.id not in order:
            order[node.id] = len(order)

    visited: set[str] = set()
    groups: list[Group] = []
    orphans: list[str] = []

    for seed in order:
        if seed in visited:
            continue
        visited.add(seed)

        if g.degree(seed) == 0:
            orphans.append(seed)
            continue

        members: list[str] = []
        stack: list[str] = [seed]
        while stack:
            current = stack.pop()
            members.append(current)
            for neighbor in g.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    stack.append(neighbor)

        members.sort(key=order.__getitem__)
        groups.append(Group(node_ids=members))

    if orphans:
        groups.append(Group(node_ids=orphans, is_orphan=True))

    logger.debug(
        f"Partitioned {len(order)} nodes into {len(groups)} groups "
        f"({len(orphans)} orphans, {g.number_of_edges()} edges)"
    )
    return groups
