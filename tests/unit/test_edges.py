"""Tests for edge collection across tasks and batches."""

from __future__ import annotations

from epicviz.ir.model import Batch, Task
from epicviz.layout.edges import batch_edge_id, collect_edges, task_edge_id


def make_batch(number: int, *task_specs: tuple[int, tuple[int, ...]], deps: tuple[int, ...] = ()) -> Batch:
    task_list = tuple(Task(number=n, title=f"T{n}", depends_on=d) for n, d in task_specs)
    return Batch(number=number, title=f"B{number}", tasks=task_list, depends_on=deps)


class TestEdgeIds:
    def test_ids(self):
        assert task_edge_id(1, 2) == "edge-1-2"
        assert batch_edge_id(3, 4) == "batch-edge-3-4"


class TestCollectEdges:
    def test_intra_and_inter_batch(self):
        batches = [make_batch(1, (10, ()), (11, (10,))), make_batch(2, (20, (11,)))]
        edges = collect_edges(batches)
        assert [(e.id, e.is_inter_batch, e.from_batch, e.to_batch) for e in edges] == [
            ("edge-10-11", False, 1, 1),
            ("edge-11-20", True, 1, 2),
        ]

    def test_batch_edges_come_last(self):
        batches = [make_batch(1, (10, ())), make_batch(2, (20, (10,)), deps=(1,))]
        edges = collect_edges(batches)
        assert [e.id for e in edges] == ["edge-10-20", "batch-edge-1-2"]
        assert edges[1].is_batch_edge
        assert edges[1].is_inter_batch

    def test_edges_point_from_dependency_to_dependent(self):
        (edge,) = collect_edges([make_batch(1, (10, ()), (11, (10,)))])
        assert (edge.from_id, edge.to_id) == (10, 11)

    def test_unknown_targets_dropped(self):
        batches = [make_batch(1, (10, (404,)), deps=(9,))]
        assert collect_edges(batches) == []

    def test_empty(self):
        assert collect_edges([]) == []
