"""Exceptions raised by the layout engine."""

from __future__ import annotations


class LayoutError(Exception):
    """Base class for all layout failures."""


class DelegateError(LayoutError):
    """The layout delegate raised while laying out one group.

    The original exception is chained as ``__cause__``.

    Attributes:
        group_index: Position of the failed group in partition order.
        node_ids: Ids of the nodes in the failed group.
        message: Human-readable error message
    """

    def __init__(
        self,
        group_index: int,
        node_ids: list[str],
        message: str | None = None,
    ) -> None:
        self.group_index = group_index
        self.node_ids = node_ids
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        preview = ", ".join(f"'{n}'" for n in self.node_ids[:5])
        if len(self.node_ids) > 5:
            preview += f", … ({len(self.node_ids) - 5} more)"
        return f"Layout delegate failed for group {self.group_index} [{preview}]"


class FlowFormatError(LayoutError):
    """A flow document record is missing a required field."""

    def __init__(self, record: object, missing: str) -> None:
        self.record = record
        self.missing = missing
        super().__init__(f"Flow record is missing '{missing}': {record!r}")
