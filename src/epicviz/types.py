"""Shared type definitions for epicviz.

Enums used across the domain model, layout and routing.
"""

from __future__ import annotations

from enum import Enum


class IssueStatus(Enum):
    DONE = "done"
    IN_PROGRESS = "in-progress"
    PLANNED = "planned"
    NOT_PLANNED = "not-planned"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> IssueStatus:
        """Map a status string (including the ready/blocked aliases) to a status."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = value.strip().lower()
        if key in _STATUS_ALIASES:
            return _STATUS_ALIASES[key]
        for status in cls:
            if status.value == key:
                return status
        return cls.UNKNOWN


_STATUS_ALIASES: dict[str, IssueStatus] = {
    "ready": IssueStatus.PLANNED,
    "blocked": IssueStatus.NOT_PLANNED,
}


class InnerDirection(Enum):
    DOWN = "down"  # layers stack top to bottom
    RIGHT = "right"  # layers run left to right

    @classmethod
    def default(cls) -> InnerDirection:
        return cls.DOWN


class Port(Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def is_vertical(self) -> bool:
        return self in (Port.TOP, Port.BOTTOM)
