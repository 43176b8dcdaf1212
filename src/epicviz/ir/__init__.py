"""Intermediate representation: domain model and dependency graphs."""

from epicviz.ir.graph import DependencyGraph, build_batch_graph, build_task_graph
from epicviz.ir.model import Batch, Dependency, Epic, Task, collect_dependencies, compute_progress

__all__ = [
    "Batch",
    "Dependency",
    "DependencyGraph",
    "Epic",
    "Task",
    "build_batch_graph",
    "build_task_graph",
    "collect_dependencies",
    "compute_progress",
]
