"""Layout delegate interface.

A delegate is the layered-layout capability the engine prepares input for:
it receives sized nodes and directed edges for one group and returns an x/y
per node. Delegates must be free of side effects; the engine may call one
concurrently for different groups.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flowlayout.types import RawPosition


class Direction(enum.Enum):
    """Layering direction: edges flow towards this side of the drawing."""

    RIGHT = "RIGHT"
    DOWN = "DOWN"


@dataclass(frozen=True)
class DelegateNode:
    """A sized node as the delegate sees it.

    ``source_side`` is where outgoing edges leave the node and ``target_side``
    where incoming edges enter; for left-to-right flows that is right/left.
    """

    id: str
    width: float
    height: float
    source_side: str = "right"
    target_side: str = "left"


@dataclass(frozen=True)
class DelegateEdge:
    id: str
    source: str
    target: str


@dataclass
class LayoutRequest:
    """Abstract input for one delegate call."""

    nodes: list[DelegateNode] = field(default_factory=list)
    edges: list[DelegateEdge] = field(default_factory=list)
    direction: Direction = Direction.RIGHT
    node_spacing: float = 20.0
    layer_spacing: float = 40.0

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def to_elk_graph(self, graph_id: str = "root") -> dict[str, Any]:
        """Serialize as an ELK JSON graph for an elkjs-backed delegate."""
        return {
            "id": graph_id,
            "layoutOptions": {
                "elk.algorithm": "layered",
                "elk.direction": self.direction.value,
                "elk.spacing.nodeNode": str(self.node_spacing),
                "elk.layered.spacing.nodeNodeBetweenLayers": str(self.layer_spacing),
                "org.eclipse.elk.layered.nodePlacement.strategy": "NETWORK_SIMPLEX",
            },
            "children": [
                {
                    "id": n.id,
                    "width": n.width,
                    "height": n.height,
                    "sourcePosition": n.source_side,
                    "targetPosition": n.target_side,
                    "labels": [{"text": n.id}],
                }
                for n in self.nodes
            ],
            "edges": [{"id": e.id, "sources": [e.source], "targets": [e.target]} for e in self.edges],
        }


@runtime_checkable
class LayoutDelegate(Protocol):
    """Protocol that all layout delegates must implement."""

    async def layout(self, request: LayoutRequest) -> list[RawPosition]:
        """Compute a position for each requested node.

        Ids missing from the result are tolerated by the engine; those nodes
        keep the position they arrived with.
        """
        ...


class SugiyamaDelegate:
    """Default in-process delegate backed by :class:`SugiyamaLayout`.

    The layout itself is CPU-bound, so it runs in the loop's default executor
    and concurrent group layouts do not block the event loop.
    """

    def __init__(self, max_passes: int = 24) -> None:
        from flowlayout.sugiyama import SugiyamaLayout

        self._engine = SugiyamaLayout(max_passes=max_passes)

    async def layout(self, request: LayoutRequest) -> list[RawPosition]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._engine.layout, request)
