"""Edge collection: every task and batch dependency as a LayoutEdge."""

from __future__ import annotations

from collections.abc import Sequence

from epicviz.ir.model import Batch
from epicviz.layout.types import LayoutEdge


def task_edge_id(from_id: int, to_id: int) -> str:
    return f"edge-{from_id}-{to_id}"


def batch_edge_id(from_id: int, to_id: int) -> str:
    return f"batch-edge-{from_id}-{to_id}"


def collect_edges(batches: Sequence[Batch]) -> list[LayoutEdge]:
    """Collect task-to-task edges (intra and inter batch), then batch-to-batch edges.

    An edge runs from the blocking node (the dependency) to the blocked node.
    Task dependencies on tasks outside the epic are dropped, as are batch
    dependencies on batches outside it.
    """
    task_to_batch: dict[int, int] = {}
    for batch in batches:
        for task in batch.tasks:
            task_to_batch[task.number] = batch.number
    batch_numbers = {b.number for b in batches}

    edges: list[LayoutEdge] = []
    for batch in batches:
        for task in batch.tasks:
            for dep in task.depends_on:
                from_batch = task_to_batch.get(dep)
                if from_batch is None:
                    continue
                edges.append(
                    LayoutEdge(
                        id=task_edge_id(dep, task.number),
                        from_id=dep,
                        to_id=task.number,
                        is_inter_batch=from_batch != batch.number,
                        from_batch=from_batch,
                        to_batch=batch.number,
                        is_batch_edge=False,
                    )
                )

    for batch in batches:
        for dep in batch.depends_on:
            if dep not in batch_numbers:
                continue
            edges.append(
                LayoutEdge(
                    id=batch_edge_id(dep, batch.number),
                    from_id=dep,
                    to_id=batch.number,
                    is_inter_batch=True,
                    from_batch=dep,
                    to_batch=batch.number,
                    is_batch_edge=True,
                )
            )

    return edges
