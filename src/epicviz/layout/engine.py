"""Layout orchestration: inner layouts, packing, translation, edges, routing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import Executor

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.graph import build_batch_graph
from epicviz.ir.model import Batch, Epic
from epicviz.layout.edges import collect_edges
from epicviz.layout.layered import InnerLayout, layout_batch
from epicviz.layout.packer import build_super_nodes, pack_groups_into_columns, position_batches, position_tasks
from epicviz.layout.router import route_edges
from epicviz.layout.sizing import NodeSizeEstimator
from epicviz.layout.types import LayoutDiagnostic, LayoutResult, PositionedBatch

logger = logging.getLogger(__name__)

CYCLE = "cycle"


class EpicLayout:
    """Two-level layout engine for one Epic snapshot.

    Stateless apart from the size estimator, whose cache may be shared
    between runs and threads.
    """

    def __init__(self, config: LayoutConfig | None = None, estimator: NodeSizeEstimator | None = None) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.estimator = estimator if estimator is not None else NodeSizeEstimator()

    def inner_layout(self, batch: Batch) -> InnerLayout:
        return layout_batch(batch, self.config, self.estimator)

    def prewarm(self, epic: Epic) -> None:
        """Measure every task in batch order before any inner layout runs."""
        self.estimator.prewarm((task for batch in epic.batches for task in batch.tasks), self.config)

    def layout(self, epic: Epic, executor: Executor | None = None) -> LayoutResult:
        if not epic.batches:
            return self.empty_result()
        self.prewarm(epic)
        if executor is not None:
            inner = list(executor.map(self.inner_layout, epic.batches))
        else:
            inner = [self.inner_layout(b) for b in epic.batches]
        return self.assemble(epic, inner)

    async def layout_async(self, epic: Epic) -> LayoutResult:
        if not epic.batches:
            return self.empty_result()
        self.prewarm(epic)
        inner = await asyncio.gather(*(asyncio.to_thread(self.inner_layout, b) for b in epic.batches))
        return self.assemble(epic, list(inner))

    def empty_result(self) -> LayoutResult:
        side = self.config.canvas_padding * 2
        return LayoutResult(batches=(), tasks=(), edges=(), canvas_width=side, canvas_height=side)

    def assemble(self, epic: Epic, inner_layouts: Sequence[InnerLayout]) -> LayoutResult:
        """Pack batches around finished inner layouts, then route every edge."""
        config = self.config
        batches = epic.batches
        by_number = {layout.batch_number: layout for layout in inner_layouts}

        batch_graph = build_batch_graph(batches)
        super_nodes = build_super_nodes(batches, by_number, config)
        packed = pack_groups_into_columns(super_nodes, batches, config, batch_graph)

        positioned_batches = position_batches(batches, packed)
        positioned_tasks = position_tasks(batches, by_number, packed, config)
        edges = collect_edges(batches)
        routed = route_edges(edges, positioned_tasks, positioned_batches, config)

        canvas_width, canvas_height = canvas_size(positioned_batches, config.canvas_padding)

        diagnostics: list[LayoutDiagnostic] = []
        for layout in inner_layouts:
            for nodes in layout.cycles:
                diagnostics.append(cycle_diagnostic("batch", layout.batch_number, nodes))
        epic_cycles = [] if batch_graph.is_dag() else batch_graph.cycles()
        for nodes in epic_cycles:
            diagnostics.append(cycle_diagnostic("epic", epic.number, nodes))

        logger.debug(
            "epic %s: %d batches (%d batch dependencies), %d tasks, %d edges, canvas %sx%s",
            epic.locator,
            batch_graph.node_count(),
            batch_graph.edge_count(),
            len(positioned_tasks),
            len(routed),
            canvas_width,
            canvas_height,
        )
        return LayoutResult(
            batches=tuple(positioned_batches),
            tasks=tuple(positioned_tasks),
            edges=tuple(routed),
            canvas_width=canvas_width,
            canvas_height=canvas_height,
            diagnostics=tuple(diagnostics),
        )


def canvas_size(batches: Sequence[PositionedBatch], padding: float) -> tuple[float, float]:
    """Furthest batch edge plus padding, never below twice the padding."""
    width = max((b.x + b.width + padding for b in batches), default=0)
    height = max((b.y + b.height + padding for b in batches), default=0)
    return max(width, padding * 2), max(height, padding * 2)


def cycle_diagnostic(scope: str, container: int, nodes: tuple[int, ...]) -> LayoutDiagnostic:
    kind_name = "tasks" if scope == "batch" else "batches"
    message = f"dependency cycle among {kind_name} {', '.join(f'#{n}' for n in nodes)}"
    logger.warning("%s %s: %s", scope, container, message)
    return LayoutDiagnostic(kind=CYCLE, scope=scope, container=container, nodes=nodes, message=message)


def compute_layout(
    epic: Epic,
    config: LayoutConfig | None = None,
    estimator: NodeSizeEstimator | None = None,
    executor: Executor | None = None,
) -> LayoutResult:
    """Compute the full two-level layout of ``epic``.

    Per-batch inner layouts run through ``executor.map`` when an executor is
    given; packing and routing wait for all of them.
    """
    return EpicLayout(config, estimator).layout(epic, executor)


async def compute_layout_async(
    epic: Epic,
    config: LayoutConfig | None = None,
    estimator: NodeSizeEstimator | None = None,
) -> LayoutResult:
    """Like ``compute_layout``, with inner layouts run concurrently in worker threads.

    There is no cancellation hook; callers that recompute on every edit keep
    only the latest result.
    """
    return await EpicLayout(config, estimator).layout_async(epic)
