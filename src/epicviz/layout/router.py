"""Orthogonal edge routing between positioned tasks and batches.

Port choice is split into small docking functions, one per edge kind, each
returning a DockingRule. The rule's ports are turned into an orthogonal
polyline, and the polyline into a path with rounded corners.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.layout.types import (
    Box,
    LayoutEdge,
    PathSegment,
    Point,
    PositionedBatch,
    PositionedTask,
    RoutedEdge,
)
from epicviz.types import Port

logger = logging.getLogger(__name__)

# ─── Routing constants ───────────────────────────────────────────────────────

TASK_CORNER_RADIUS: float = 6
BATCH_CORNER_RADIUS: float = 10
ALIGN_TOLERANCE: float = 1
DETOUR_SIDE_THRESHOLD: float = 50
BATCH_GAP_THRESHOLD: float = 100


# ─── Ports ───────────────────────────────────────────────────────────────────


def port_point(box: Box, port: Port) -> Point:
    """Midpoint of the given side of ``box``."""
    if port is Port.TOP:
        return Point(box.x + box.width / 2, box.y)
    if port is Port.RIGHT:
        return Point(box.x + box.width, box.y + box.height / 2)
    if port is Port.BOTTOM:
        return Point(box.x + box.width / 2, box.y + box.height)
    return Point(box.x, box.y + box.height / 2)


@dataclass(frozen=True)
class DockingRule:
    """Exit port on the source, entry port on the target, optional detour column.

    ``detour_x`` is set for C-shaped routes whose vertical run sits outside
    both boxes.
    """

    from_port: Port
    to_port: Port
    detour_x: float | None = None


def _dominant_axis(dx: float, dy: float) -> DockingRule:
    if abs(dy) > abs(dx):
        if dy > 0:
            return DockingRule(Port.BOTTOM, Port.TOP)
        return DockingRule(Port.TOP, Port.BOTTOM)
    if dx > 0:
        return DockingRule(Port.RIGHT, Port.LEFT)
    return DockingRule(Port.LEFT, Port.RIGHT)


def task_docking(source: Box, target: Box) -> DockingRule:
    """Intra-batch task edge: exit on the side facing the target."""
    dx = target.center.x - source.center.x
    dy = target.center.y - source.center.y
    return _dominant_axis(dx, dy)


def inter_batch_docking(source: Box, target: Box, clearance: float) -> DockingRule:
    """Inter-batch task edge: left and right ports only.

    Nearly vertically aligned tasks get a C-shaped detour ``clearance``
    pixels outside both boxes so the line never crosses a batch header.
    """
    dx = target.center.x - source.center.x
    dy = target.center.y - source.center.y

    if abs(dy) > 2 * abs(dx):
        if dx > DETOUR_SIDE_THRESHOLD:
            return DockingRule(Port.RIGHT, Port.RIGHT, max(source.right, target.right) + clearance)
        return DockingRule(Port.LEFT, Port.LEFT, min(source.x, target.x) - clearance)

    if dx > 0:
        return DockingRule(Port.RIGHT, Port.LEFT)
    return DockingRule(Port.LEFT, Port.RIGHT)


def batch_docking(source: Box, target: Box) -> DockingRule:
    """Batch edge: a target up and across a column gap is entered from below."""
    dx = target.center.x - source.center.x
    dy = target.center.y - source.center.y

    if dx > 0:
        horizontal_gap = target.x - source.right
    else:
        horizontal_gap = source.x - target.right

    if dy < 0 and horizontal_gap > BATCH_GAP_THRESHOLD and abs(dy) > BATCH_GAP_THRESHOLD:
        exit_port = Port.RIGHT if dx > 0 else Port.LEFT
        return DockingRule(exit_port, Port.BOTTOM)

    return _dominant_axis(dx, dy)


# ─── Path Construction ───────────────────────────────────────────────────────


def build_orthogonal_path(start: Point, end: Point, rule: DockingRule) -> list[Point]:
    """Polyline from ``start`` to ``end`` made of axis-aligned segments."""
    points = [start]

    if rule.detour_x is not None:
        points.append(Point(rule.detour_x, start.y))
        points.append(Point(rule.detour_x, end.y))
    elif rule.from_port.is_vertical and rule.to_port.is_vertical:
        if abs(start.x - end.x) > ALIGN_TOLERANCE:
            mid_y = start.y + (end.y - start.y) / 2
            points.append(Point(start.x, mid_y))
            points.append(Point(end.x, mid_y))
    elif not rule.from_port.is_vertical and not rule.to_port.is_vertical:
        if abs(start.y - end.y) > ALIGN_TOLERANCE:
            mid_x = start.x + (end.x - start.x) / 2
            points.append(Point(mid_x, start.y))
            points.append(Point(mid_x, end.y))
    elif rule.from_port.is_vertical:
        points.append(Point(start.x, end.y))
    else:
        points.append(Point(end.x, start.y))

    points.append(end)
    return points


def _distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def smooth_path(points: Sequence[Point], corner_radius: float) -> list[PathSegment]:
    """Round every interior corner with a quadratic curve.

    The radius at a corner is capped at half of either adjacent segment, so
    neighbouring curves never overlap.
    """
    if not points:
        return []
    segments = [PathSegment("M", (points[0],))]
    if len(points) == 1:
        return segments

    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        d1 = _distance(prev, curr)
        d2 = _distance(curr, nxt)
        if d1 == 0 or d2 == 0:
            segments.append(PathSegment("L", (curr,)))
            continue

        radius = min(corner_radius, d1 / 2, d2 / 2)
        t1 = radius / d1
        t2 = radius / d2
        approach = Point(curr.x - (curr.x - prev.x) * t1, curr.y - (curr.y - prev.y) * t1)
        depart = Point(curr.x + (nxt.x - curr.x) * t2, curr.y + (nxt.y - curr.y) * t2)
        segments.append(PathSegment("L", (approach,)))
        segments.append(PathSegment("Q", (curr, depart)))

    segments.append(PathSegment("L", (points[-1],)))
    return segments


# ─── Edge Routing ────────────────────────────────────────────────────────────


def route_edge(
    edge: LayoutEdge,
    task_map: dict[int, PositionedTask],
    batch_map: dict[int, PositionedBatch],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RoutedEdge:
    """Route a single edge.

    A missing endpoint or a self-dependency gives an empty, unrenderable route.
    """
    if edge.from_id == edge.to_id:
        logger.debug("edge %s: self-dependency, left unrouted", edge.id)
        return RoutedEdge(edge=edge)
    if edge.is_batch_edge:
        from_batch = batch_map.get(edge.from_id)
        to_batch = batch_map.get(edge.to_id)
        if from_batch is None or to_batch is None:
            logger.debug("edge %s: missing batch endpoint, left unrouted", edge.id)
            return RoutedEdge(edge=edge)
        source, target = from_batch.box, to_batch.box
        rule = batch_docking(source, target)
        radius = BATCH_CORNER_RADIUS
    else:
        from_task = task_map.get(edge.from_id)
        to_task = task_map.get(edge.to_id)
        if from_task is None or to_task is None:
            logger.debug("edge %s: missing task endpoint, left unrouted", edge.id)
            return RoutedEdge(edge=edge)
        source, target = from_task.box, to_task.box
        if edge.is_inter_batch:
            rule = inter_batch_docking(source, target, config.group_spacing)
        else:
            rule = task_docking(source, target)
        radius = TASK_CORNER_RADIUS

    start = port_point(source, rule.from_port)
    end = port_point(target, rule.to_port)
    points = build_orthogonal_path(start, end, rule)
    return RoutedEdge(edge=edge, points=tuple(points), segments=tuple(smooth_path(points, radius)))


def route_edges(
    edges: Sequence[LayoutEdge],
    tasks: Sequence[PositionedTask],
    batches: Sequence[PositionedBatch],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[RoutedEdge]:
    """Route every edge against the positioned tasks and batches, in input order."""
    task_map = {t.task_number: t for t in tasks}
    batch_map = {b.batch_number: b for b in batches}
    routed = [route_edge(edge, task_map, batch_map, config) for edge in edges]
    logger.debug(
        "routed %d edges (%d unrenderable)",
        len(routed),
        sum(1 for r in routed if not r.is_renderable),
    )
    return routed
