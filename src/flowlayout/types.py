"""Layout types shared across the partitioner, delegate, resolver and compositor."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any


class NodeKind(enum.Enum):
    """Node kind tag. NOTE nodes are annotations that never take part in layout."""

    DEFAULT = "default"
    NOTE = "note"


@dataclass(frozen=True)
class Position:
    """Top-left corner of a node, in pixels."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Size:
    """A node size. Measured sizes may lack either dimension."""

    width: float | None = None
    height: float | None = None


@dataclass(frozen=True)
class Node:
    """A visual node as supplied by the caller.

    ``width``/``height`` are explicit sizes; ``measured`` is the size reported
    by the renderer after the node was drawn. Either may be missing. ``data``
    is carried through layout untouched.
    """

    id: str
    position: Position = field(default_factory=Position)
    kind: NodeKind = NodeKind.DEFAULT
    width: float | None = None
    height: float | None = None
    measured: Size | None = None
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_pass_through(self) -> bool:
        return self.kind is NodeKind.NOTE

    def with_position(self, x: float, y: float) -> Node:
        """Return a copy of this node moved to (x, y)."""
        return replace(self, position=Position(x=x, y=y))


@dataclass(frozen=True)
class Edge:
    """A directed source → target connection between two nodes."""

    id: str
    source: str
    target: str


@dataclass(frozen=True)
class RawPosition:
    """A node coordinate as returned by a layout delegate."""

    id: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class ResolvedGroup:
    """A group after overlap resolution, positioned at a group-local origin.

    Attributes:
        nodes: Nodes carrying their group-local positions, in resolution order.
        height: Vertical extent of the tallest x-rank (column) of the group.
        unplaced: Nodes the delegate produced no coordinate for. They keep the
            position they arrived with and are not offset by the compositor.
    """

    nodes: list[Node] = field(default_factory=list)
    height: float = 0.0
    unplaced: list[Node] = field(default_factory=list)
