"""Centralized configuration for epicviz."""

from __future__ import annotations

from dataclasses import dataclass, replace

from epicviz.types import InnerDirection


@dataclass(frozen=True)
class LayoutConfig:
    """Spacing and sizing options for the layout pipeline (pixels)."""

    node_spacing: float = 16
    group_spacing: float = 48
    group_padding: float = 20
    group_header_height: float = 48
    row_gap: float = 48
    column_gap: float = 48
    canvas_padding: float = 48
    task_width: float = 260
    task_min_height: float = 60
    inner_direction: InnerDirection = InnerDirection.default()

    @property
    def layer_gap(self) -> float:
        """Gap between consecutive layers inside a batch."""
        return self.node_spacing * 1.5

    def with_overrides(self, **changes: object) -> LayoutConfig:
        return replace(self, **changes)


DEFAULT_CONFIG = LayoutConfig()
