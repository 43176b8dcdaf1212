"""Batch (outer) packing.

Each batch becomes a super-node sized by its inner layout plus header and
padding. Batches are placed in columns by dependency depth so batch arrows
flow left to right, and ordered within each column so a batch sits near the
dependents it feeds in the next column.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.graph import DependencyGraph, build_batch_graph
from epicviz.ir.model import Batch
from epicviz.layout.layered import InnerLayout
from epicviz.layout.types import BATCH_PREFIX, TASK_PREFIX, PositionedBatch, PositionedTask

logger = logging.getLogger(__name__)

# ─── Geometry constants ──────────────────────────────────────────────────────

EMPTY_CONTENT_WIDTH: float = 200
EMPTY_CONTENT_HEIGHT: float = 100
HEADER_FONT_SIZE: float = 13
GLYPH_WIDTH_RATIO: float = 0.55
PROGRESS_BAR_WIDTH: float = 80
HEADER_INSET: float = 32
BATCH_EDGE_WEIGHT: int = 5


def estimate_text_width(text: str, font_size: float) -> float:
    return len(text) * font_size * GLYPH_WIDTH_RATIO


# ─── Super-nodes ─────────────────────────────────────────────────────────────


@dataclass
class GroupSuperNode:
    batch_number: int
    batch: Batch
    width: float
    height: float
    connections: dict[int, int] = field(default_factory=dict)

    @property
    def weight(self) -> int:
        return sum(self.connections.values())


def build_super_nodes(
    batches: Sequence[Batch],
    inner_layouts: Mapping[int, InnerLayout],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[GroupSuperNode]:
    """Size every batch box and count its connections to other batches.

    A task dependency on another batch's task adds 1 toward that batch; a
    batch-level dependency adds ``BATCH_EDGE_WEIGHT``.
    """
    batch_numbers = {b.number for b in batches}
    task_to_batch: dict[int, int] = {}
    for batch in batches:
        for task in batch.tasks:
            task_to_batch[task.number] = batch.number

    nodes: list[GroupSuperNode] = []
    for batch in batches:
        inner = inner_layouts.get(batch.number)
        content_w = inner.width if inner is not None and inner.width else EMPTY_CONTENT_WIDTH
        content_h = inner.height if inner is not None and inner.height else EMPTY_CONTENT_HEIGHT

        header_min_w = estimate_text_width(batch.title, HEADER_FONT_SIZE) + PROGRESS_BAR_WIDTH + HEADER_INSET
        width = max(content_w + config.group_padding * 2, header_min_w)
        height = content_h + config.group_padding * 2 + config.group_header_height

        connections: dict[int, int] = {}
        for task in batch.tasks:
            for dep in task.depends_on:
                other = task_to_batch.get(dep)
                if other is None or other == batch.number:
                    continue
                connections[other] = connections.get(other, 0) + 1
        for dep in batch.depends_on:
            if dep in batch_numbers:
                connections[dep] = connections.get(dep, 0) + BATCH_EDGE_WEIGHT

        nodes.append(GroupSuperNode(batch.number, batch, width, height, connections))

    return nodes


# ─── Depth (column) Assignment ───────────────────────────────────────────────


def compute_batch_depths(batches: Sequence[Batch], graph: DependencyGraph | None = None) -> dict[int, int]:
    """Relax ``depth(b) = max(depth(dep) + 1)`` to a fixed point.

    Depths only grow, and at most ``len(batches) + 1`` passes run, so cyclic
    batch dependencies terminate with finite depths.
    """
    graph = graph if graph is not None else build_batch_graph(batches)
    depths: dict[int, int] = {b.number: 0 for b in batches}

    changed = True
    passes = 0
    max_passes = len(batches) + 1
    while changed and passes < max_passes:
        changed = False
        passes += 1
        for batch in batches:
            deps = graph.depends_on(batch.number)
            if not deps:
                continue
            new_depth = max(depths[d] for d in deps) + 1
            if new_depth > depths[batch.number]:
                depths[batch.number] = new_depth
                changed = True

    logger.debug("batch depths settled after %d passes", passes)
    return depths


# ─── Column Packing ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PackedGroup:
    batch_number: int
    x: float
    y: float
    width: float
    height: float
    row: int
    col: int


def order_columns(
    super_nodes: Sequence[GroupSuperNode],
    depths: Mapping[int, int],
    graph: DependencyGraph,
) -> dict[int, list[GroupSuperNode]]:
    """Order batches inside each depth column, right to left.

    The last column goes by connection weight. Earlier columns put batches
    with dependents in the next column first, by the mean row of those
    dependents, then the rest by connection weight.
    """
    columns: dict[int, list[GroupSuperNode]] = {}
    for node in super_nodes:
        columns.setdefault(depths.get(node.batch_number, 0), []).append(node)
    max_depth = max(columns, default=0)

    dependents_in_next: dict[int, list[int]] = {}
    for node in super_nodes:
        depth = depths.get(node.batch_number, 0)
        for dep in graph.depends_on(node.batch_number):
            if depths.get(dep, 0) == depth - 1:
                dependents_in_next.setdefault(dep, []).append(node.batch_number)

    row_of: dict[int, int] = {}

    def alignment_key(node: GroupSuperNode) -> tuple[int, float, int]:
        dependents = dependents_in_next.get(node.batch_number, [])
        if dependents:
            mean_row = sum(row_of.get(d, 0) for d in dependents) / len(dependents)
            return (0, mean_row, 0)
        return (1, 0.0, -node.weight)

    for col in range(max_depth, -1, -1):
        in_col = columns.get(col, [])
        if col == max_depth:
            in_col.sort(key=lambda n: -n.weight)
        else:
            in_col.sort(key=alignment_key)
        for row, node in enumerate(in_col):
            row_of[node.batch_number] = row

    return columns


def pack_groups_into_columns(
    super_nodes: Sequence[GroupSuperNode],
    batches: Sequence[Batch],
    config: LayoutConfig = DEFAULT_CONFIG,
    graph: DependencyGraph | None = None,
) -> list[PackedGroup]:
    """Place batches in depth columns, each column centered on its widest batch."""
    graph = graph if graph is not None else build_batch_graph(batches)
    depths = compute_batch_depths(batches, graph)
    columns = order_columns(super_nodes, depths, graph)
    max_depth = max(columns, default=0)

    column_widths: list[float] = []
    column_x: list[float] = []
    x = config.canvas_padding
    for col in range(max_depth + 1):
        in_col = columns.get(col, [])
        width = max((n.width for n in in_col), default=0)
        column_widths.append(width)
        column_x.append(x)
        x += width + config.column_gap

    packed: list[PackedGroup] = []
    for col in range(max_depth + 1):
        y = config.canvas_padding
        for row, node in enumerate(columns.get(col, [])):
            x_offset = (column_widths[col] - node.width) / 2
            packed.append(
                PackedGroup(
                    batch_number=node.batch_number,
                    x=column_x[col] + x_offset,
                    y=y,
                    width=node.width,
                    height=node.height,
                    row=row,
                    col=col,
                )
            )
            y += node.height + config.row_gap

    logger.debug("packed %d batches into %d columns", len(packed), max_depth + 1)
    return packed


# ─── Absolute Positions ──────────────────────────────────────────────────────


def position_batches(batches: Sequence[Batch], packed: Sequence[PackedGroup]) -> list[PositionedBatch]:
    by_number = {g.batch_number: g for g in packed}
    result: list[PositionedBatch] = []
    for batch in batches:
        group = by_number.get(batch.number)
        if group is None:
            continue
        result.append(
            PositionedBatch(
                id=f"{BATCH_PREFIX}{batch.number}",
                batch_number=batch.number,
                title=batch.title,
                status=batch.status,
                x=group.x,
                y=group.y,
                width=group.width,
                height=group.height,
                progress=batch.progress,
                row=group.row,
                col=group.col,
            )
        )
    return result


def position_tasks(
    batches: Sequence[Batch],
    inner_layouts: Mapping[int, InnerLayout],
    packed: Sequence[PackedGroup],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[PositionedTask]:
    """Translate inner task boxes by the batch origin, header and padding."""
    by_number = {g.batch_number: g for g in packed}
    result: list[PositionedTask] = []
    for batch in batches:
        inner = inner_layouts.get(batch.number)
        group = by_number.get(batch.number)
        if inner is None or group is None:
            continue
        offset_x = group.x + config.group_padding
        offset_y = group.y + config.group_header_height + config.group_padding
        for task in batch.tasks:
            box = inner.boxes.get(task.number)
            if box is None:
                continue
            result.append(
                PositionedTask(
                    id=f"{TASK_PREFIX}{task.number}",
                    task_number=task.number,
                    title=task.title,
                    status=task.status,
                    x=offset_x + box.x,
                    y=offset_y + box.y,
                    width=box.width,
                    height=box.height,
                    batch_number=batch.number,
                    depends_on=task.depends_on,
                )
            )
    return result
