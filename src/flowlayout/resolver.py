"""Coordinate resolution — remove vertical overlap within each x-rank.

Delegates produce continuous coordinates, so two nodes of the same rank can
end up a fraction of a pixel apart in x, or close enough in y to overlap.
Nodes are bucketed by rounded x and restacked top to bottom from y = 0 with
at least ``spacing`` between consecutive boxes.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from flowlayout.types import Node, RawPosition, ResolvedGroup


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``round`` rounds to even)."""
    return math.floor(value + 0.5)


def bucket_by_rank(positions: Iterable[RawPosition]) -> dict[int, list[RawPosition]]:
    """Group positions by rounded x, each bucket sorted by raw y.

    The sort is stable, so ties keep delegate output order.
    """
    buckets: dict[int, list[RawPosition]] = {}
    for pos in positions:
        buckets.setdefault(round_half_up(pos.x), []).append(pos)
    for bucket in buckets.values():
        bucket.sort(key=lambda p: p.y)
    return buckets


def resolve(
    positions: Iterable[RawPosition],
    nodes_by_id: Mapping[str, Node],
    spacing: float,
    unplaced: Iterable[Node] = (),
) -> ResolvedGroup:
    """Restack raw delegate positions into a group-local, overlap-free layout.

    Within each rank: y = cursor, cursor += height + spacing, starting at 0.
    x is the rounded raw x. The group height is the bottom edge of the
    tallest rank, i.e. the largest cursor minus its trailing spacing.
    """
    group = ResolvedGroup(unplaced=list(unplaced))

    for x, bucket in bucket_by_rank(positions).items():
        cursor = 0.0
        for pos in bucket:
            node = nodes_by_id[pos.id]
            group.nodes.append(node.with_position(x, cursor))
            cursor += pos.height + spacing
        group.height = max(group.height, cursor - spacing)

    return group
