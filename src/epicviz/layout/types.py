"""Layout types shared by the layout phases, the router and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from epicviz.types import IssueStatus


@dataclass(frozen=True)
class Point:
    """A 2D point in canvas pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class Box:
    """A node's size and position relative to some origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PositionedTask:
    """A task card placed on the canvas (absolute coordinates)."""

    id: str
    task_number: int
    title: str
    status: IssueStatus
    x: float
    y: float
    width: float
    height: float
    batch_number: int
    depends_on: tuple[int, ...] = ()

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class PositionedBatch:
    """A batch container placed on the canvas."""

    id: str
    batch_number: int
    title: str
    status: IssueStatus
    x: float
    y: float
    width: float
    height: float
    progress: int
    row: int
    col: int

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class LayoutEdge:
    """A dependency edge, drawn from the blocking node to the blocked node."""

    id: str
    from_id: int
    to_id: int
    is_inter_batch: bool
    from_batch: int
    to_batch: int
    is_batch_edge: bool = False


@dataclass(frozen=True)
class PathSegment:
    """One drawing command: ``M``/``L`` take one point, ``Q`` a control and an end point."""

    command: str
    points: tuple[Point, ...]

    def to_svg(self) -> str:
        coords = " ".join(f"{_fmt(p.x)} {_fmt(p.y)}" for p in self.points)
        return f"{self.command} {coords}"


@dataclass(frozen=True)
class RoutedEdge:
    """A LayoutEdge with its polyline and smoothed path."""

    edge: LayoutEdge
    points: tuple[Point, ...] = ()
    segments: tuple[PathSegment, ...] = ()

    @property
    def id(self) -> str:
        return self.edge.id

    @property
    def path(self) -> str:
        """SVG path data; empty when the edge could not be routed."""
        return " ".join(s.to_svg() for s in self.segments)

    @property
    def is_renderable(self) -> bool:
        return bool(self.segments)


@dataclass(frozen=True)
class LayoutDiagnostic:
    """A non-fatal observation about the input, e.g. a dependency cycle."""

    kind: str
    scope: str
    container: int
    nodes: tuple[int, ...]
    message: str


@dataclass(frozen=True)
class LayoutResult:
    """Self-contained layout output handed to the rendering layer."""

    batches: tuple[PositionedBatch, ...]
    tasks: tuple[PositionedTask, ...]
    edges: tuple[RoutedEdge, ...]
    canvas_width: float
    canvas_height: float
    diagnostics: tuple[LayoutDiagnostic, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used by the renderer."""
        return {
            "batches": [
                {
                    "id": b.id,
                    "batchNumber": b.batch_number,
                    "title": b.title,
                    "status": b.status.value,
                    "x": b.x,
                    "y": b.y,
                    "width": b.width,
                    "height": b.height,
                    "progress": b.progress,
                    "row": b.row,
                    "col": b.col,
                }
                for b in self.batches
            ],
            "tasks": [
                {
                    "id": t.id,
                    "taskNumber": t.task_number,
                    "title": t.title,
                    "status": t.status.value,
                    "x": t.x,
                    "y": t.y,
                    "width": t.width,
                    "height": t.height,
                    "batchNumber": t.batch_number,
                    "dependsOn": list(t.depends_on),
                }
                for t in self.tasks
            ],
            "edges": [
                {
                    "id": e.edge.id,
                    "from": e.edge.from_id,
                    "to": e.edge.to_id,
                    "isInterBatch": e.edge.is_inter_batch,
                    "fromBatch": e.edge.from_batch,
                    "toBatch": e.edge.to_batch,
                    "isBatchEdge": e.edge.is_batch_edge,
                    "path": e.path,
                    "points": [{"x": p.x, "y": p.y} for p in e.points],
                }
                for e in self.edges
            ],
            "canvasWidth": self.canvas_width,
            "canvasHeight": self.canvas_height,
            "diagnostics": [
                {
                    "kind": d.kind,
                    "scope": d.scope,
                    "container": d.container,
                    "nodes": list(d.nodes),
                    "message": d.message,
                }
                for d in self.diagnostics
            ],
        }


def _fmt(value: float) -> str:
    rounded = round(value, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


# Prefix constants
TASK_PREFIX = "task-"
BATCH_PREFIX = "batch-"
