"""Group composition — stack resolved groups and merge pass-through nodes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from flowlayout.types import Node, ResolvedGroup


def compose(
    groups: Sequence[ResolvedGroup],
    pass_through: Iterable[Node],
    spacing: float,
) -> list[Node]:
    """Stack groups top to bottom and append pass-through nodes untouched.

    Groups are offset in the order given, which must be partition order, so
    the result never depends on which delegate call finished first. Each
    group starts ``2 * spacing`` below the bottom of the previous one. Empty
    groups contribute no height. x values are not changed.

    Output order: each group's placed nodes, then its unplaced nodes, then the
    pass-through nodes.
    """
    result: list[Node] = []
    offset = 0.0

    for group in groups:
        if not group.nodes and not group.unplaced:
            continue
        for node in group.nodes:
            result.append(node.with_position(node.position.x, offset + node.position.y))
        result.extend(group.unplaced)
        if group.nodes:
            offset += group.height + 2 * spacing

    result.extend(pass_through)
    return result
