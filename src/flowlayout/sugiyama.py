"""Sugiyama-style layered layout backing the built-in delegate.

Phases:
  1. Cycle removal  (greedy-FAS approach)
  2. Layer assignment (longest path over the cycle-free graph)
  3. Dummy node insertion for edges spanning more than one layer
  4. Crossing minimization (barycenter heuristic)
  5. Coordinate assignment (pixel x/y along the requested direction)

Every phase iterates nodes in request order, never in set order, so the same
request always yields the same coordinates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import networkx as nx

from flowlayout.delegate import Direction, LayoutRequest
from flowlayout.types import RawPosition

DUMMY_PREFIX = "__dummy_"

# ─── Graph Construction ───────────────────────────────────────────────────────


def build_digraph(request: LayoutRequest) -> nx.DiGraph:
    """Build a DiGraph from a layout request.

    Node attributes: ``width``, ``height``. Edges whose endpoints were not
    requested are skipped.
    """
    g: nx.DiGraph = nx.DiGraph()
    for node in request.nodes:
        g.add_node(node.id, width=node.width, height=node.height)
    for edge in request.edges:
        if edge.source in g and edge.target in g:
            g.add_edge(edge.source, edge.target)
    return g


# ─── Cycle Removal (Greedy-FAS) ───────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Compute a node ordering using the greedy-FAS heuristic.

    Returns a list of node ids in an ordering that minimizes back-edges.
    Nodes earlier in the ordering should have outgoing edges going forward.

    Algorithm (Eades, Lin, Smyth 1993):
    - Maintain dynamic in/out degree counters updated as nodes are removed.
    - Repeatedly:
        1. Move all sinks (out_deg == 0) to s2.
        2. Move all sources (in_deg == 0) to s1.
        3. Of remaining nodes in cycles, pick max (out - in) and add to s1.
    - Final ordering: s1 + reversed(s2).
    """
    # A dict keeps insertion order, so scans and ties follow graph order.
    active: dict[str, None] = dict.fromkeys(graph.nodes)

    out_deg: dict[str, int] = {}
    in_deg: dict[str, int] = {}
    for node in graph.nodes:
        # Self-loops never constrain the ordering.
        loops = 1 if graph.has_edge(node, node) else 0
        out_deg[node] = graph.out_degree(node) - loops
        in_deg[node] = graph.in_degree(node) - loops

    s1: list[str] = []
    s2: list[str] = []

    def drop(node: str) -> None:
        del active[node]
        for succ in graph.successors(node):
            if succ in active:
                in_deg[succ] -= 1
        for pred in graph.predecessors(node):
            if pred in active:
                out_deg[pred] -= 1

    while active:
        changed = True
        while changed:
            sinks = [n for n in active if out_deg[n] == 0]
            changed = bool(sinks)
            for sink in sinks:
                drop(sink)
                s2.append(sink)

        changed = True
        while changed:
            sources = [n for n in active if in_deg[n] == 0]
            changed = bool(sources)
            for source in sources:
                drop(source)
                s1.append(source)

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            drop(best)
            s1.append(best)

    s2.reverse()
    s1.extend(s2)
    return s1


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Remove cycles from a copy of the DiGraph using the greedy-FAS heuristic.

    Returns a tuple of:
    - new_graph: copy of graph with back-edges reversed (self-loops removed)
    - reversed_edges: set of (src_id, tgt_id) tuples that were reversed
      (identified relative to the ORIGINAL graph's edge directions)
    """
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    position: dict[str, int] = {node: pos for pos, node in enumerate(greedy_fas_ordering(graph))}

    reversed_edges: set[tuple[str, str]] = set()
    for src, tgt in graph.edges():
        if src == tgt or position[src] > position[tgt]:
            reversed_edges.add((src, tgt))

    new_graph: nx.DiGraph = nx.DiGraph()
    for node_id in graph.nodes:
        new_graph.add_node(node_id, **graph.nodes[node_id])

    for src, tgt, edge_attrs in graph.edges(data=True):
        if src == tgt:
            continue
        if (src, tgt) in reversed_edges:
            new_graph.add_edge(tgt, src, **edge_attrs)
        else:
            new_graph.add_edge(src, tgt, **edge_attrs)

    return new_graph, reversed_edges


# ─── Layer Assignment ─────────────────────────────────────────────────────────


class LayerAssignment:
    """Result of layer assignment: each node is assigned a layer (rank).

    Layer 0 is the "first" layer (left for RIGHT, top for DOWN).

    Attributes:
        layers: Maps node id → layer index.
        layer_count: Total number of layers.
        dag: The cycle-free copy of the graph the layers were computed on.
        reversed_edges: Edges reversed during cycle removal (as (src, tgt) pairs).
    """

    def __init__(
        self,
        layers: dict[str, int],
        layer_count: int,
        dag: nx.DiGraph,
        reversed_edges: set[tuple[str, str]],
    ) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.dag = dag
        self.reversed_edges = reversed_edges

    @classmethod
    def assign(cls, graph: nx.DiGraph) -> LayerAssignment:
        """Assign longest-path layers: rank[v] = max(rank[u] + 1) over edges u→v."""
        dag, reversed_edges = remove_cycles(graph)

        layers: dict[str, int] = {node_id: 0 for node_id in dag.nodes}
        for node_id in nx.topological_sort(dag):
            for succ in dag.successors(node_id):
                if layers[succ] < layers[node_id] + 1:
                    layers[succ] = layers[node_id] + 1

        layer_count = (max(layers.values()) + 1) if layers else 0
        return cls(layers=layers, layer_count=layer_count, dag=dag, reversed_edges=reversed_edges)


# ─── Dummy Node Insertion ─────────────────────────────────────────────────────


@dataclass
class AugmentedGraph:
    """A graph augmented with dummy nodes for edges that span multiple layers.

    After dummy node insertion, every edge in the augmented graph connects
    nodes in adjacent layers. Dummy nodes have zero size.
    """

    graph: nx.DiGraph
    layers: dict[str, int]
    layer_count: int
    dummy_ids: list[str] = field(default_factory=list)


def insert_dummy_nodes(la: LayerAssignment) -> AugmentedGraph:
    """Replace each edge u → v with layer[v] - layer[u] > 1 by the chain
    u → d₁ → … → dₖ → v, one dummy per intermediate layer.
    """
    dag = la.dag
    g: nx.DiGraph = nx.DiGraph()
    for node_id in dag.nodes:
        g.add_node(node_id, **dag.nodes[node_id])

    layers: dict[str, int] = dict(la.layers)
    dummy_ids: list[str] = []

    for edge_idx, (src_id, tgt_id) in enumerate(list(dag.edges())):
        span = layers[tgt_id] - layers[src_id]
        if span <= 1:
            g.add_edge(src_id, tgt_id)
            continue

        chain_prev = src_id
        for i in range(span - 1):
            dummy_id = f"{DUMMY_PREFIX}{edge_idx}_{i}"
            g.add_node(dummy_id, width=0, height=0)
            layers[dummy_id] = layers[src_id] + i + 1
            dummy_ids.append(dummy_id)
            g.add_edge(chain_prev, dummy_id)
            chain_prev = dummy_id
        g.add_edge(chain_prev, tgt_id)

    return AugmentedGraph(graph=g, layers=layers, layer_count=la.layer_count, dummy_ids=dummy_ids)


# ─── Crossing Minimization (Barycenter) ───────────────────────────────────────


def minimise_crossings(aug: AugmentedGraph, max_passes: int = 24) -> list[list[str]]:
    """Minimise edge crossings using the barycenter heuristic.

    The initial order of each layer is graph insertion order (request order,
    then dummies). Alternating top-down and bottom-up sweeps run until the
    crossing count stops improving; the best ordering seen is returned.
    """
    ordering: list[list[str]] = [[] for _ in range(aug.layer_count)]
    for node_id in aug.graph.nodes:
        ordering[aug.layers[node_id]].append(node_id)

    best = count_crossings(ordering, aug.graph)
    best_ordering = [list(layer) for layer in ordering]

    for _pass in range(max_passes):
        if best == 0:
            break

        for layer_idx in range(1, aug.layer_count):
            prev = {nid: float(i) for i, nid in enumerate(ordering[layer_idx - 1])}
            _sort_layer(ordering[layer_idx], aug.graph, prev, "incoming")

        for layer_idx in range(aug.layer_count - 2, -1, -1):
            nxt = {nid: float(i) for i, nid in enumerate(ordering[layer_idx + 1])}
            _sort_layer(ordering[layer_idx], aug.graph, nxt, "outgoing")

        new = count_crossings(ordering, aug.graph)
        if new >= best:
            break
        best = new
        best_ordering = [list(layer) for layer in ordering]

    return best_ordering


def _sort_layer(layer: list[str], graph: nx.DiGraph, neighbor_pos: dict[str, float], direction: str) -> None:
    """Sort a layer in place by barycenter; nodes with no neighbours keep their slot."""
    current = {nid: float(i) for i, nid in enumerate(layer)}
    layer.sort(key=lambda nid: _barycenter(nid, graph, neighbor_pos, direction, current[nid]))


def _barycenter(
    node_id: str,
    graph: nx.DiGraph,
    neighbor_pos: dict[str, float],
    direction: str,
    default: float,
) -> float:
    """Average position of a node's neighbours in the adjacent layer.

    direction: "incoming" to look at predecessors, "outgoing" for successors.
    """
    neighbors = graph.predecessors(node_id) if direction == "incoming" else graph.successors(node_id)
    positions = [neighbor_pos[nb] for nb in neighbors if nb in neighbor_pos]
    if not positions:
        return default
    return sum(positions) / len(positions)


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    """Count edge crossings between consecutive layers (inversion count)."""
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[str, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            for nb in graph.successors(src_id):
                if nb in tgt_pos:
                    edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] - ej[0]) * (ei[1] - ej[1]) < 0:
                    total += 1
    return total


# ─── Coordinate Assignment ────────────────────────────────────────────────────


@dataclass
class LayoutNode:
    """A positioned node in the layout, including dummies."""

    id: str
    layer: int
    order: int
    x: float
    y: float
    width: float
    height: float


def assign_coordinates(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    direction: Direction = Direction.RIGHT,
    node_spacing: float = 20.0,
    layer_spacing: float = 40.0,
) -> list[LayoutNode]:
    """Assign pixel coordinates to every node in the augmented graph.

    The layer axis is x for RIGHT and y for DOWN; nodes of one layer share the
    same layer-axis coordinate and are stacked along the other axis with
    ``node_spacing`` between them, centred on the widest layer.
    """
    along_x = direction is Direction.RIGHT

    def extent(node_id: str) -> tuple[float, float]:
        """(size along the layer axis, size across it)."""
        attrs = aug.graph.nodes[node_id]
        w, h = attrs.get("width", 0), attrs.get("height", 0)
        return (w, h) if along_x else (h, w)

    layer_pos: list[float] = []
    cursor = 0.0
    for layer_nodes in ordering:
        layer_pos.append(cursor)
        depth = max((extent(nid)[0] for nid in layer_nodes), default=0)
        cursor += depth + layer_spacing

    layer_breadth: list[float] = []
    for layer_nodes in ordering:
        total = sum(extent(nid)[1] for nid in layer_nodes)
        layer_breadth.append(total + max(0, len(layer_nodes) - 1) * node_spacing)
    widest = max(layer_breadth, default=0)

    cross: dict[str, float] = {}
    for layer_idx, layer_nodes in enumerate(ordering):
        pos = (widest - layer_breadth[layer_idx]) / 2
        for node_id in layer_nodes:
            cross[node_id] = pos
            pos += extent(node_id)[1] + node_spacing

    _align_layers(ordering, aug.graph, cross, extent, node_spacing)

    if cross:
        low = min(cross.values())
        for node_id in cross:
            cross[node_id] -= low

    nodes: list[LayoutNode] = []
    for layer_idx, layer_nodes in enumerate(ordering):
        for order, node_id in enumerate(layer_nodes):
            attrs = aug.graph.nodes[node_id]
            main, across = layer_pos[layer_idx], cross[node_id]
            nodes.append(
                LayoutNode(
                    id=node_id,
                    layer=layer_idx,
                    order=order,
                    x=main if along_x else across,
                    y=across if along_x else main,
                    width=attrs.get("width", 0),
                    height=attrs.get("height", 0),
                )
            )
    return nodes


def _align_layers(
    ordering: list[list[str]],
    graph: nx.DiGraph,
    cross: dict[str, float],
    extent: Callable[[str], tuple[float, float]],
    max_shift: float,
) -> None:
    """Shift whole layers so their centres line up with their neighbours'.

    A top-down pass aligns each layer with its parents, then a bottom-up pass
    with its children. Only shifts up to ``max_shift`` are applied, so this
    corrects small misalignment from centring without reshaping the layout.
    """

    def centre(node_id: str) -> float:
        return cross[node_id] + extent(node_id)[1] / 2

    def shift_layer(layer: list[str], neighbours_of: Callable[[str], Iterable[str]]) -> None:
        own = 0.0
        other = 0.0
        count = 0
        for node_id in layer:
            for nb in neighbours_of(node_id):
                own += centre(node_id)
                other += centre(nb)
                count += 1
        if count == 0:
            return
        shift = (other - own) / count
        if abs(shift) > max_shift:
            return
        for node_id in layer:
            cross[node_id] += shift

    for layer_idx in range(1, len(ordering)):
        shift_layer(ordering[layer_idx], graph.predecessors)
    for layer_idx in range(len(ordering) - 2, -1, -1):
        shift_layer(ordering[layer_idx], graph.successors)


# ─── Full Layout Pipeline ─────────────────────────────────────────────────────


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def __init__(self, max_passes: int = 24) -> None:
        self.max_passes = max_passes

    def layout(self, request: LayoutRequest) -> list[RawPosition]:
        """Lay out one request; returns positions for the requested nodes only."""
        if not request.nodes:
            return []

        graph = build_digraph(request)
        la = LayerAssignment.assign(graph)
        aug = insert_dummy_nodes(la)
        ordering = minimise_crossings(aug, self.max_passes)
        placed = assign_coordinates(
            ordering,
            aug,
            request.direction,
            request.node_spacing,
            request.layer_spacing,
        )

        by_id = {n.id: n for n in placed}
        return [
            RawPosition(id=nid, x=by_id[nid].x, y=by_id[nid].y, width=by_id[nid].width, height=by_id[nid].height)
            for nid in graph.nodes
        ]
