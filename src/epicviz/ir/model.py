"""Domain model: the Epic → Batch → Task snapshot the layout engine consumes.

Snapshots are immutable. A repository client (GitHub, or the static mock in
``epicviz.mock``) builds them; the layout engine never mutates them.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from epicviz.types import IssueStatus


@dataclass(frozen=True)
class Dependency:
    """``from_id`` depends on ``to_id``."""

    from_id: int
    to_id: int
    kind: str = "depends-on"


@dataclass(frozen=True)
class Task:
    number: int
    title: str
    status: IssueStatus = IssueStatus.UNKNOWN
    depends_on: tuple[int, ...] = ()
    id: int | None = None

    @property
    def key(self) -> int:
        """Stable identity; falls back to the display number."""
        return self.number if self.id is None else self.id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        _require_mapping(data, "task")
        return cls(
            number=_require_int(data, "number"),
            title=str(data.get("title", "")),
            status=IssueStatus.parse(data.get("status")),
            depends_on=_int_tuple(data, "dependsOn"),
            id=_optional_int(data, "id"),
        )


@dataclass(frozen=True)
class Batch:
    number: int
    title: str
    tasks: tuple[Task, ...] = ()
    status: IssueStatus = IssueStatus.UNKNOWN
    depends_on: tuple[int, ...] = ()
    progress: int = 0
    id: int | None = None

    @property
    def key(self) -> int:
        return self.number if self.id is None else self.id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Batch:
        _require_mapping(data, "batch")
        raw_tasks = data.get("tasks", [])
        if not isinstance(raw_tasks, list):
            raise ValueError(f"batch 'tasks' must be a list, got {type(raw_tasks).__name__}")
        tasks = tuple(Task.from_dict(t) for t in raw_tasks)
        progress = data.get("progress")
        return cls(
            number=_require_int(data, "number"),
            title=str(data.get("title", "")),
            tasks=tasks,
            status=IssueStatus.parse(data.get("status")),
            depends_on=_int_tuple(data, "dependsOn"),
            progress=compute_progress(tasks) if progress is None else int(progress),
            id=_optional_int(data, "id"),
        )


@dataclass(frozen=True)
class Epic:
    number: int
    title: str
    batches: tuple[Batch, ...] = ()
    owner: str = ""
    repo: str = ""
    status: IssueStatus = IssueStatus.UNKNOWN
    dependencies: tuple[Dependency, ...] = ()
    id: int | None = None

    @property
    def locator(self) -> str:
        """``owner/repo#number`` reference for the epic issue."""
        return f"{self.owner}/{self.repo}#{self.number}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Epic:
        """Build an Epic from the camelCase JSON shape of the repository client.

        Raises:
            ValueError: If a required key is missing or has the wrong type.
        """
        _require_mapping(data, "epic")
        raw_batches = data.get("batches", [])
        if not isinstance(raw_batches, list):
            raise ValueError(f"epic 'batches' must be a list, got {type(raw_batches).__name__}")
        batches = tuple(Batch.from_dict(b) for b in raw_batches)

        raw_deps = data.get("dependencies")
        if raw_deps:
            if not isinstance(raw_deps, list):
                raise ValueError(f"epic 'dependencies' must be a list, got {type(raw_deps).__name__}")
            for d in raw_deps:
                _require_mapping(d, "dependency")
            dependencies = tuple(
                Dependency(
                    from_id=_require_int(d, "from"),
                    to_id=_require_int(d, "to"),
                    kind=str(d.get("type", "depends-on")),
                )
                for d in raw_deps
            )
        else:
            dependencies = collect_dependencies(batches)

        return cls(
            number=_require_int(data, "number"),
            title=str(data.get("title", "")),
            batches=batches,
            owner=str(data.get("owner", "")),
            repo=str(data.get("repo", "")),
            status=IssueStatus.parse(data.get("status")),
            dependencies=dependencies,
            id=_optional_int(data, "id"),
        )

    @classmethod
    def from_json(cls, text: str) -> Epic:
        """Parse an Epic JSON document.

        Raises:
            ValueError: If the text is not JSON, or not a valid epic object.
        """
        return cls.from_dict(json.loads(text))


def compute_progress(tasks: Iterable[Task]) -> int:
    """Percentage of done tasks, rounded half up; 0 for an empty batch."""
    task_list = list(tasks)
    if not task_list:
        return 0
    done = sum(1 for t in task_list if t.status is IssueStatus.DONE)
    return math.floor(done / len(task_list) * 100 + 0.5)


def collect_dependencies(batches: Iterable[Batch]) -> tuple[Dependency, ...]:
    """Flatten batch- and task-level dependsOn lists into Dependency records."""
    deps: list[Dependency] = []
    for batch in batches:
        for dep in batch.depends_on:
            deps.append(Dependency(from_id=batch.number, to_id=dep))
        for task in batch.tasks:
            for dep in task.depends_on:
                deps.append(Dependency(from_id=task.number, to_id=dep))
    return tuple(deps)


def _require_mapping(data: object, what: str) -> None:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")


def _require_int(data: Mapping[str, Any], key: str) -> int:
    if key not in data:
        raise ValueError(f"missing required key '{key}'")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def _optional_int(data: Mapping[str, Any], key: str) -> int | None:
    if data.get(key) is None:
        return None
    return _require_int(data, key)


def _int_tuple(data: Mapping[str, Any], key: str) -> tuple[int, ...]:
    values = data.get(key) or []
    if not isinstance(values, list):
        raise ValueError(f"'{key}' must be a list of integers, got {values!r}")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"'{key}' must be a list of integers, got {values!r}")
    return tuple(values)
