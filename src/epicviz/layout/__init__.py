"""Layout engine public API."""

from __future__ import annotations

from epicviz.layout.edges import batch_edge_id, collect_edges, task_edge_id
from epicviz.layout.engine import EpicLayout, compute_layout, compute_layout_async
from epicviz.layout.layered import (
    GridPlacement,
    InnerLayout,
    assign_columns,
    assign_coordinates,
    assign_rows,
    layout_batch,
    layout_tasks,
    normalize_rows,
)
from epicviz.layout.packer import (
    GroupSuperNode,
    PackedGroup,
    build_super_nodes,
    compute_batch_depths,
    pack_groups_into_columns,
)
from epicviz.layout.router import DockingRule, build_orthogonal_path, route_edges, smooth_path
from epicviz.layout.sizing import NodeDimensions, NodeSizeEstimator
from epicviz.layout.types import (
    BATCH_PREFIX,
    TASK_PREFIX,
    Box,
    LayoutDiagnostic,
    LayoutEdge,
    LayoutResult,
    PathSegment,
    Point,
    PositionedBatch,
    PositionedTask,
    RoutedEdge,
)

__all__ = [
    "BATCH_PREFIX",
    "TASK_PREFIX",
    "Box",
    "DockingRule",
    "EpicLayout",
    "GridPlacement",
    "GroupSuperNode",
    "InnerLayout",
    "LayoutDiagnostic",
    "LayoutEdge",
    "LayoutResult",
    "NodeDimensions",
    "NodeSizeEstimator",
    "PackedGroup",
    "PathSegment",
    "Point",
    "PositionedBatch",
    "PositionedTask",
    "RoutedEdge",
    "assign_columns",
    "assign_coordinates",
    "assign_rows",
    "batch_edge_id",
    "build_orthogonal_path",
    "build_super_nodes",
    "collect_edges",
    "compute_batch_depths",
    "compute_layout",
    "compute_layout_async",
    "layout_batch",
    "layout_tasks",
    "normalize_rows",
    "pack_groups_into_columns",
    "route_edges",
    "smooth_path",
    "task_edge_id",
]
