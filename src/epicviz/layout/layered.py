"""Layered (Sugiyama-style) layout of the tasks inside one batch.

Phases:
  1. Column assignment (dependency depth)
  2. Row assignment (barycenter crossing reduction)
  3. Coordinate assignment (per-column widths, per-row heights)

The same column and row phases serve any node set with a DependencyGraph;
the batch packer reuses the graph builder for the outer level.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.graph import DependencyGraph, build_task_graph
from epicviz.ir.model import Batch, Task
from epicviz.layout.sizing import NodeDimensions, NodeSizeEstimator
from epicviz.layout.types import Box
from epicviz.types import InnerDirection

logger = logging.getLogger(__name__)


# ─── Column Assignment ───────────────────────────────────────────────────────


def assign_columns(nodes: Sequence[int], graph: DependencyGraph) -> dict[int, int]:
    """Assign each node its dependency depth.

    ``column(n) = 0`` without in-graph dependencies, else one more than the
    deepest dependency. A dependency already on the current recursion path
    contributes 0, which breaks cycles without raising.
    """
    columns: dict[int, int] = {}

    def column_of(node_id: int, path: frozenset[int]) -> int:
        if node_id in path:
            return 0
        if node_id in columns:
            return columns[node_id]

        valid_deps = [d for d in graph.depends_on(node_id) if graph.has_node(d)]
        if not valid_deps:
            columns[node_id] = 0
            return 0

        on_path = path | {node_id}
        col = max(column_of(d, on_path) for d in valid_deps) + 1
        columns[node_id] = col
        return col

    for node_id in nodes:
        column_of(node_id, frozenset())

    return columns


# ─── Row Assignment (Crossing Reduction) ─────────────────────────────────────


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _nearest_free_row(start: int, used: set[int]) -> int:
    """Probe +1, -1, +2, -2, … from ``start``; negative rows are never used."""
    if start not in used:
        return start
    offset = 0
    while True:
        offset += 1
        if start + offset not in used:
            return start + offset
        if start - offset >= 0 and start - offset not in used:
            return start - offset


def group_by_column(nodes: Sequence[int], columns: Mapping[int, int]) -> dict[int, list[int]]:
    groups: dict[int, list[int]] = {}
    for node_id in nodes:
        groups.setdefault(columns.get(node_id, 0), []).append(node_id)
    return groups


def assign_rows(nodes: Sequence[int], columns: Mapping[int, int], graph: DependencyGraph) -> dict[int, int]:
    """Order the nodes of every column with the barycenter heuristic.

    Column 0 puts the most depended-upon nodes first. Later columns place each
    node at the mean row of its already-placed dependencies, resolving
    collisions by outward probing. Rows are finally remapped to a contiguous
    0..k range across all columns.
    """
    rows: dict[int, int] = {}
    groups = group_by_column(nodes, columns)
    max_col = max(columns.values(), default=0)

    for col in range(max_col + 1):
        in_col = groups.get(col, [])

        if col == 0:
            ordered = sorted(in_col, key=lambda n: -len(graph.depended_by(n)))
            for idx, node_id in enumerate(ordered):
                rows[node_id] = idx
            continue

        positions: list[tuple[int, float]] = []
        for idx, node_id in enumerate(in_col):
            dep_rows = [rows[d] for d in graph.depends_on(node_id) if graph.has_node(d) and d in rows]
            ideal = sum(dep_rows) / len(dep_rows) if dep_rows else float(idx)
            positions.append((node_id, ideal))

        positions.sort(key=lambda p: p[1])

        used: set[int] = set()
        for node_id, ideal in positions:
            row = _nearest_free_row(_round_half_up(ideal), used)
            used.add(row)
            rows[node_id] = row

    return normalize_rows(rows)


def normalize_rows(rows: Mapping[int, int]) -> dict[int, int]:
    """Remap the distinct row values to 0..k, preserving their order."""
    mapping = {row: idx for idx, row in enumerate(sorted(set(rows.values())))}
    return {node_id: mapping[row] for node_id, row in rows.items()}


# ─── Coordinate Assignment ───────────────────────────────────────────────────


@dataclass(frozen=True)
class GridPlacement:
    """Node boxes plus the overall canvas size of one grid layout."""

    boxes: dict[int, Box]
    canvas_width: float
    canvas_height: float


def _origins(sizes: Sequence[float], padding: float, gap: float) -> list[float]:
    origins: list[float] = []
    pos = padding
    for size in sizes:
        origins.append(pos)
        pos += size + gap
    return origins


def _extent(sizes: Sequence[float], padding: float, gap: float) -> float:
    gaps = (len(sizes) - 1) * gap if len(sizes) > 1 else 0
    return padding * 2 + sum(sizes) + gaps


def assign_coordinates(
    columns: Mapping[int, int],
    rows: Mapping[int, int],
    sizes: Mapping[int, NodeDimensions],
    padding: float,
    layer_gap: float,
    node_gap: float,
    direction: InnerDirection = DEFAULT_CONFIG.inner_direction,
) -> GridPlacement:
    """Convert (column, row) indices into pixel boxes.

    Each layer is as deep as its largest node along the layer axis and each
    row as wide as its largest node across it. With ``InnerDirection.RIGHT``
    layers advance along x; with ``InnerDirection.DOWN`` they advance along y
    and rows spread along x.
    """
    is_down = direction is InnerDirection.DOWN
    layer_count = max(columns.values(), default=-1) + 1
    row_count = max(rows.values(), default=-1) + 1

    def along_layer(dims: NodeDimensions) -> float:
        return dims.height if is_down else dims.width

    def across_layer(dims: NodeDimensions) -> float:
        return dims.width if is_down else dims.height

    layer_sizes = [0.0] * layer_count
    row_sizes = [0.0] * row_count
    for node_id, col in columns.items():
        dims = sizes[node_id]
        row = rows.get(node_id, 0)
        layer_sizes[col] = max(layer_sizes[col], along_layer(dims))
        row_sizes[row] = max(row_sizes[row], across_layer(dims))

    layer_origin = _origins(layer_sizes, padding, layer_gap)
    row_origin = _origins(row_sizes, padding, node_gap)

    boxes: dict[int, Box] = {}
    for node_id, col in columns.items():
        dims = sizes[node_id]
        row = rows.get(node_id, 0)
        if is_down:
            boxes[node_id] = Box(row_origin[row], layer_origin[col], dims.width, dims.height)
        else:
            boxes[node_id] = Box(layer_origin[col], row_origin[row], dims.width, dims.height)

    layer_extent = _extent(layer_sizes, padding, layer_gap)
    row_extent = _extent(row_sizes, padding, node_gap)
    if is_down:
        return GridPlacement(boxes=boxes, canvas_width=row_extent, canvas_height=layer_extent)
    return GridPlacement(boxes=boxes, canvas_width=layer_extent, canvas_height=row_extent)


# ─── Inner (per-batch) Layout ────────────────────────────────────────────────


@dataclass(frozen=True)
class InnerLayout:
    """Task boxes of one batch relative to its content origin."""

    batch_number: int
    boxes: dict[int, Box]
    columns: dict[int, int]
    rows: dict[int, int]
    width: float
    height: float
    cycles: tuple[tuple[int, ...], ...] = ()


def layout_tasks(
    tasks: Sequence[Task],
    config: LayoutConfig = DEFAULT_CONFIG,
    estimator: NodeSizeEstimator | None = None,
    batch_number: int = 0,
) -> InnerLayout:
    """Lay out one batch's tasks; the bounding box is the tight content extent."""
    if not tasks:
        return InnerLayout(batch_number=batch_number, boxes={}, columns={}, rows={}, width=0, height=0)

    estimator = estimator if estimator is not None else NodeSizeEstimator()
    graph = build_task_graph(tasks)
    nodes = [t.number for t in tasks]

    columns = assign_columns(nodes, graph)
    rows = assign_rows(nodes, columns, graph)
    sizes = estimator.measure_tasks(tasks, config)
    placement = assign_coordinates(
        columns,
        rows,
        sizes,
        padding=0,
        layer_gap=config.layer_gap,
        node_gap=config.node_spacing,
        direction=config.inner_direction,
    )

    width = max((b.right for b in placement.boxes.values()), default=0)
    height = max((b.bottom for b in placement.boxes.values()), default=0)
    logger.debug(
        "batch %s: %d tasks, %d dependencies in %d layers, content %sx%s",
        batch_number,
        graph.node_count(),
        graph.edge_count(),
        max(columns.values(), default=0) + 1,
        width,
        height,
    )
    return InnerLayout(
        batch_number=batch_number,
        boxes=placement.boxes,
        columns=columns,
        rows=rows,
        width=width,
        height=height,
        cycles=() if graph.is_dag() else tuple(graph.cycles()),
    )


def layout_batch(
    batch: Batch,
    config: LayoutConfig = DEFAULT_CONFIG,
    estimator: NodeSizeEstimator | None = None,
) -> InnerLayout:
    return layout_tasks(batch.tasks, config, estimator, batch_number=batch.number)
