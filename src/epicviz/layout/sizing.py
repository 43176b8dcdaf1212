"""Task card size estimation with a content-bucketed memo.

Layout only needs height classes that stay stable for similar titles, so the
estimate works from title length rather than real text measurement.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from epicviz.config import DEFAULT_CONFIG, LayoutConfig
from epicviz.ir.model import Task

logger = logging.getLogger(__name__)

# ─── Card geometry constants ─────────────────────────────────────────────────

CARD_HORIZONTAL_PADDING: int = 24
GLYPH_WIDTH: int = 7
CARD_VERTICAL_PADDING: int = 16
LINE_HEIGHT: int = 18
FOOTER_HEIGHT: int = 16
TITLE_BUCKET: int = 10


@dataclass(frozen=True)
class NodeDimensions:
    width: float
    height: float


def estimate_task_height(title: str, width: float, min_height: float) -> float:
    """Estimate a card's height from its wrapped title line count."""
    chars_per_line = max(1, math.floor((width - CARD_HORIZONTAL_PADDING) / GLYPH_WIDTH))
    lines = math.ceil(len(title) / chars_per_line)
    height = CARD_VERTICAL_PADDING + lines * LINE_HEIGHT + FOOTER_HEIGHT
    return max(min_height, height)


def cache_key(title: str, width: float, min_height: float) -> str:
    bucket = math.ceil(len(title) / TITLE_BUCKET) * TITLE_BUCKET
    return f"task:{bucket}:{width}:{min_height}"


class NodeSizeEstimator:
    """Memoizing task size estimator.

    One instance owns one cache. Share an instance across layout runs to reuse
    estimates across configs; keys include the card width and minimum height.
    Entries are only ever inserted, so concurrent inner layouts may share it.
    """

    def __init__(self) -> None:
        self._cache: dict[str, NodeDimensions] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def measure(self, task: Task, config: LayoutConfig = DEFAULT_CONFIG) -> NodeDimensions:
        width = config.task_width
        key = cache_key(task.title, width, config.task_min_height)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        dims = NodeDimensions(
            width=width,
            height=estimate_task_height(task.title, width, config.task_min_height),
        )
        self._cache[key] = dims
        return dims

    def measure_tasks(self, tasks: Iterable[Task], config: LayoutConfig = DEFAULT_CONFIG) -> dict[int, NodeDimensions]:
        """Measure every task, keyed by task number."""
        return {t.number: self.measure(t, config) for t in tasks}

    def prewarm(self, tasks: Iterable[Task], config: LayoutConfig = DEFAULT_CONFIG) -> None:
        before = len(self._cache)
        for task in tasks:
            self.measure(task, config)
        logger.debug("size cache prewarmed: %d new entries", len(self._cache) - before)

    def clear(self) -> None:
        self._cache.clear()
