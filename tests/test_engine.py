"""Tests for the layout orchestrator: end-to-end scenarios on small and mock epics."""

from __future__ import annotations

import asyncio
import json
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from epicviz import layout_json
from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.model import Batch, Epic, Task
from epicviz.layout.engine import EpicLayout, canvas_size, compute_layout, compute_layout_async
from epicviz.layout.sizing import NodeSizeEstimator
from epicviz.layout.types import Box, LayoutResult, Point
from epicviz.mock import get_mock_epic
from epicviz.types import InnerDirection

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_epic(*batches: Batch) -> Epic:
    return Epic(number=1, title="Epic", batches=tuple(batches))


def make_batch(number: int, *task_specs: tuple[int, tuple[int, ...]], deps: tuple[int, ...] = ()) -> Batch:
    """Batch with tasks given as (number, depends_on) pairs."""
    task_list = tuple(Task(number=n, title=f"T{n}", depends_on=d) for n, d in task_specs)
    return Batch(number=number, title=f"B{number}", tasks=task_list, depends_on=deps)


def two_batch_epic() -> Epic:
    """B2 depends on B1, and B2's task depends on B1's task."""
    return make_epic(make_batch(1, (10, ())), make_batch(2, (20, (10,)), deps=(1,)))


class ReverseOrderExecutor(Executor):
    """Runs work synchronously, last item first, results in input order."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        future.set_result(fn(*args, **kwargs))
        return future

    def map(self, fn, *iterables, **kwargs):
        calls = list(zip(*iterables))
        results = [fn(*args) for args in reversed(calls)]
        return iter(results[::-1])


def overlaps(a: Box, b: Box) -> bool:
    return not (a.right <= b.x or b.right <= a.x or a.bottom <= b.y or b.bottom <= a.y)


def assert_no_overlap(boxes: list[Box]) -> None:
    for i, a in enumerate(boxes):
        for b in boxes[i + 1 :]:
            assert not overlaps(a, b), f"{a} overlaps {b}"


# ─── Empty / Minimal Input Tests ──────────────────────────────────────────────


class TestEmptyInput:
    def test_no_batches(self):
        result = compute_layout(make_epic())
        assert result.batches == ()
        assert result.tasks == ()
        assert result.edges == ()
        assert result.canvas_width == 2 * DEFAULT_CONFIG.canvas_padding
        assert result.canvas_height == 2 * DEFAULT_CONFIG.canvas_padding

    def test_no_batches_custom_padding(self):
        result = compute_layout(make_epic(), LayoutConfig(canvas_padding=10))
        assert (result.canvas_width, result.canvas_height) == (20, 20)

    def test_batch_without_tasks(self):
        result = compute_layout(make_epic(make_batch(1)))
        (batch,) = result.batches
        assert (batch.width, batch.height) == (240, 188)
        assert result.tasks == ()

    def test_single_task_canvas_covers_padding_and_node(self):
        result = compute_layout(make_epic(make_batch(1, (10, ()))))
        padding = DEFAULT_CONFIG.canvas_padding
        assert result.canvas_width >= padding * 2 + DEFAULT_CONFIG.task_width
        assert result.canvas_height >= padding * 2 + DEFAULT_CONFIG.task_min_height
        assert (result.canvas_width, result.canvas_height) == (48 + 300 + 48, 48 + 148 + 48)

    def test_canvas_size_floor(self):
        assert canvas_size([], 30) == (60, 60)


# ─── Scenario Tests ───────────────────────────────────────────────────────────


class TestScenarios:
    def test_fan_out_inside_one_batch(self):
        """T1 feeds T2 and T3: both sit one layer below T1, side by side."""
        result = compute_layout(make_epic(make_batch(1, (1, ()), (2, (1,)), (3, (1,)))))
        tasks = {t.task_number: t for t in result.tasks}
        assert tasks[2].y == tasks[3].y > tasks[1].y
        assert tasks[2].x != tasks[3].x
        assert_no_overlap([t.box for t in result.tasks])

    def test_inter_batch_edge_uses_side_ports(self):
        result = compute_layout(two_batch_epic())
        edge = next(e for e in result.edges if e.id == "edge-10-20")
        assert edge.edge.is_inter_batch
        assert not edge.edge.is_batch_edge

        tasks = {t.task_number: t for t in result.tasks}
        source, target = tasks[10], tasks[20]
        assert edge.points[0].x in (source.x, source.x + source.width)
        assert edge.points[-1].x in (target.x, target.x + target.width)
        assert edge.points[0] == Point(68 + 260, 116 + 30)
        assert edge.points[-1] == Point(416, 146)

    def test_two_batch_positions(self):
        result = compute_layout(two_batch_epic())
        batches = {b.batch_number: b for b in result.batches}
        assert (batches[1].x, batches[1].y, batches[1].col) == (48, 48, 0)
        assert (batches[2].x, batches[2].y, batches[2].col) == (396, 48, 1)
        assert (result.canvas_width, result.canvas_height) == (744, 244)

    def test_task_edges_precede_batch_edges(self):
        result = compute_layout(two_batch_epic())
        assert [e.id for e in result.edges] == ["edge-10-20", "batch-edge-1-2"]

    def test_batch_edge_routed(self):
        result = compute_layout(two_batch_epic())
        edge = result.edges[1]
        assert edge.points == (Point(348, 122), Point(396, 122))
        assert edge.path == "M 348 122 L 396 122"

    def test_task_cycle_terminates_and_is_reported(self, caplog):
        epic = make_epic(make_batch(1, (1, (2,)), (2, (1,))))
        with caplog.at_level(logging.WARNING):
            result = compute_layout(epic)
        assert len(result.tasks) == 2
        (diagnostic,) = result.diagnostics
        assert (diagnostic.kind, diagnostic.scope) == ("cycle", "batch")
        assert (diagnostic.container, diagnostic.nodes) == (1, (1, 2))
        assert any("cycle" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)

    def test_batch_cycle_terminates_and_is_reported(self):
        epic = make_epic(make_batch(1, (10, ()), deps=(2,)), make_batch(2, (20, ()), deps=(1,)))
        result = compute_layout(epic)
        assert len(result.batches) == 2
        assert [(d.scope, d.container, d.nodes) for d in result.diagnostics] == [("epic", 1, (1, 2))]
        assert all(e.is_renderable for e in result.edges)

    def test_self_dependency_is_reported_and_not_drawn(self):
        """A task listing itself is a one-node cycle; its edge has no path across the card."""
        result = compute_layout(make_epic(make_batch(1, (10, (10,)))))
        (edge,) = result.edges
        assert edge.id == "edge-10-10"
        assert not edge.is_renderable
        assert [(d.scope, d.nodes) for d in result.diagnostics] == [("batch", (10,))]

    def test_dangling_dependencies_are_dropped(self):
        epic = make_epic(make_batch(1, (10, (999,)), deps=(77,)))
        result = compute_layout(epic)
        assert result.edges == ()
        assert result.diagnostics == ()


# ─── Mock Epic Tests ──────────────────────────────────────────────────────────


class TestMockEpic:
    def test_counts(self):
        result = compute_layout(get_mock_epic())
        assert len(result.batches) == 7
        assert len(result.tasks) == 46
        assert len(result.edges) == 19 + 4
        assert all(e.is_renderable for e in result.edges)

    def test_debug_summary_names_epic(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="epicviz.layout.engine"):
            compute_layout(get_mock_epic())
        summary = [r.getMessage() for r in caplog.records if r.name == "epicviz.layout.engine"]
        assert any(m.startswith("epic example/repo#8833: 7 batches (4 batch dependencies), 46 tasks") for m in summary)

    def test_batch_columns_follow_dependencies(self):
        result = compute_layout(get_mock_epic())
        cols = {b.batch_number: b.col for b in result.batches}
        assert cols == {9090: 0, 9321: 0, 9324: 0, 9287: 1, 9400: 1, 9322: 1, 9323: 2}

    def test_batches_do_not_overlap(self):
        result = compute_layout(get_mock_epic())
        assert_no_overlap([b.box for b in result.batches])

    def test_tasks_inside_their_batch(self):
        config = DEFAULT_CONFIG
        result = compute_layout(get_mock_epic(), config)
        batches = {b.batch_number: b for b in result.batches}
        for task in result.tasks:
            batch = batches[task.batch_number]
            assert task.x >= batch.x + config.group_padding
            assert task.y >= batch.y + config.group_header_height + config.group_padding
            assert task.x + task.width <= batch.x + batch.width - config.group_padding + 1e-9
            assert task.y + task.height <= batch.y + batch.height - config.group_padding + 1e-9

    def test_tasks_do_not_overlap_in_either_direction(self):
        for direction in InnerDirection:
            config = DEFAULT_CONFIG.with_overrides(inner_direction=direction)
            result = compute_layout(get_mock_epic(), config)
            assert_no_overlap([t.box for t in result.tasks])

    def test_canvas_contains_every_batch(self):
        result = compute_layout(get_mock_epic())
        for batch in result.batches:
            assert batch.x + batch.width <= result.canvas_width
            assert batch.y + batch.height <= result.canvas_height

    def test_deterministic(self):
        assert compute_layout(get_mock_epic()) == compute_layout(get_mock_epic())


# ─── Concurrency Tests ────────────────────────────────────────────────────────


class TestConcurrency:
    def test_executor_matches_serial(self):
        epic = get_mock_epic()
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel = compute_layout(epic, executor=pool)
        assert parallel == compute_layout(epic)

    def test_async_matches_serial(self):
        epic = get_mock_epic()
        assert asyncio.run(compute_layout_async(epic)) == compute_layout(epic)

    def test_async_empty(self):
        result = asyncio.run(compute_layout_async(make_epic()))
        assert result.batches == ()
        assert result.canvas_width == 96

    def test_shared_estimator_is_filled(self):
        estimator = NodeSizeEstimator()
        compute_layout(get_mock_epic(), estimator=estimator)
        assert len(estimator) > 0

    def test_engine_reusable(self):
        engine = EpicLayout(DEFAULT_CONFIG)
        assert engine.layout(two_batch_epic()) == engine.layout(two_batch_epic())

    def test_batch_scheduling_does_not_change_heights(self):
        """Titles of 31 and 40 characters share a size bucket; batch order decides its height."""
        epic = make_epic(
            Batch(number=1, title="B1", tasks=(Task(number=10, title="x" * 31),)),
            Batch(number=2, title="B2", tasks=(Task(number=20, title="y" * 40),)),
        )
        serial = compute_layout(epic)
        scheduled = compute_layout(epic, executor=ReverseOrderExecutor())
        assert scheduled == serial
        assert [t.height for t in scheduled.tasks] == [60, 60]

    def test_async_scheduling_does_not_change_heights(self):
        epic = make_epic(
            Batch(number=1, title="B1", tasks=(Task(number=10, title="x" * 31),)),
            Batch(number=2, title="B2", tasks=(Task(number=20, title="y" * 40),)),
        )
        result = asyncio.run(compute_layout_async(epic))
        assert [t.height for t in result.tasks] == [60, 60]

    def test_shared_estimator_respects_raised_minimum(self):
        estimator = NodeSizeEstimator()
        epic = make_epic(make_batch(1, (10, ()), (11, (10,))))
        compute_layout(epic, estimator=estimator)
        result = compute_layout(epic, LayoutConfig(task_min_height=200), estimator=estimator)
        assert all(t.height >= 200 for t in result.tasks)


# ─── Serialization Tests ──────────────────────────────────────────────────────


class TestSerialization:
    def test_to_dict_is_json_ready(self):
        data = json.loads(json.dumps(compute_layout(two_batch_epic()).to_dict()))
        assert set(data) == {"batches", "tasks", "edges", "canvasWidth", "canvasHeight", "diagnostics"}
        assert data["batches"][0]["batchNumber"] == 1
        assert data["tasks"][1]["dependsOn"] == [10]
        assert data["edges"][0]["isInterBatch"] is True
        assert data["edges"][1]["isBatchEdge"] is True
        assert data["edges"][0]["path"].startswith("M ")

    def test_layout_json(self):
        src = json.dumps(
            {
                "number": 5,
                "title": "E",
                "batches": [{"number": 1, "title": "B", "tasks": [{"number": 2, "title": "T", "status": "done"}]}],
            }
        )
        data = json.loads(layout_json(src))
        assert data["batches"][0]["progress"] == 100
        assert data["tasks"][0]["status"] == "done"

    def test_result_type(self):
        assert isinstance(compute_layout(make_epic()), LayoutResult)
