"""epicviz: two-level layout of Epic → Batch → Task dependency diagrams."""

import json

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.model import Batch, Epic, Task
from epicviz.layout.engine import compute_layout, compute_layout_async
from epicviz.layout.router import route_edges
from epicviz.layout.sizing import NodeSizeEstimator
from epicviz.layout.types import LayoutResult
from epicviz.types import InnerDirection, IssueStatus

__all__ = [
    "DEFAULT_CONFIG",
    "Batch",
    "Epic",
    "InnerDirection",
    "IssueStatus",
    "LayoutConfig",
    "LayoutResult",
    "NodeSizeEstimator",
    "Task",
    "compute_layout",
    "compute_layout_async",
    "layout_json",
    "route_edges",
]


def layout_json(src: str, config: LayoutConfig | None = None) -> str:
    """Lay out an Epic given as a JSON string and return the result as JSON.

    Args:
        src: Epic JSON in the repository client's camelCase shape.
        config: Layout options; defaults to ``DEFAULT_CONFIG``.

    Returns:
        The ``LayoutResult`` serialized with ``LayoutResult.to_dict``.

    Raises:
        ValueError: If the input is not valid JSON or not a valid epic.
    """
    return json.dumps(compute_layout(Epic.from_json(src), config).to_dict())
