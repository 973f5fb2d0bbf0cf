"""Layout configuration."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any

# ─── Defaults ─────────────────────────────────────────────────────────────────

NODE_WIDTH: int = 384
NODE_HEIGHT: int = 224
NODE_SPACING: int = 20


class ErrorPolicy(enum.Enum):
    """What to do when the layout delegate raises for one group.

    RAISE aborts the whole layout with ``DelegateError``. STACK replaces the
    failed group's coordinates with a single stacked column and carries on.
    """

    RAISE = "raise"
    STACK = "stack"


@dataclass(frozen=True)
class LayoutConfig:
    """Options recognised by the layout engine.

    Attributes:
        spacing: Minimum gap between nodes sharing an x-rank. Consecutive
            groups are separated by twice this value.
        default_width: Width used when a node has neither an explicit nor a
            measured width.
        default_height: Height used when a node has neither an explicit nor a
            measured height.
        on_delegate_error: Failure policy for delegate errors.
        concurrent: Issue per-group delegate calls concurrently.
    """

    spacing: float = NODE_SPACING
    default_width: float = NODE_WIDTH
    default_height: float = NODE_HEIGHT
    on_delegate_error: ErrorPolicy = ErrorPolicy.RAISE
    concurrent: bool = True

    def __post_init__(self) -> None:
        if self.spacing < 0:
            raise ValueError(f"spacing must be >= 0, got {self.spacing}")
        if self.default_width <= 0 or self.default_height <= 0:
            raise ValueError(
                f"default node size must be positive, got {self.default_width}x{self.default_height}"
            )
        if not isinstance(self.on_delegate_error, ErrorPolicy):
            object.__setattr__(self, "on_delegate_error", ErrorPolicy(self.on_delegate_error))

    @property
    def group_gap(self) -> float:
        """Vertical gap between consecutive groups."""
        return 2 * self.spacing

    def replace(self, **changes: Any) -> LayoutConfig:
        return dataclasses.replace(self, **changes)
