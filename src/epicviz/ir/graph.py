"""Dependency graphs, one networkx DiGraph per layout level.

Two graphs feed the layout: one per batch over its task numbers (inner), and
one over the epic's batch numbers (outer). Edges run dependency → dependent,
so ``predecessors`` are the nodes a node depends on and ``successors`` are
the nodes that depend on it. Targets outside the node set are dropped here;
cross-batch task links are collected by ``epicviz.layout.edges``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import networkx as nx

from epicviz.ir.model import Batch, Task


class DependencyGraph:
    """Adjacency over one node set, restricted to in-set dependencies.

    Node order and per-node dependency order follow the input lists.
    """

    def __init__(self, digraph: nx.DiGraph) -> None:
        self.digraph = digraph

    @classmethod
    def from_pairs(cls, nodes: Iterable[int], depends_on: Iterable[tuple[int, Sequence[int]]]) -> DependencyGraph:
        """Build from node ids and ``(node, [dependencies])`` pairs."""
        digraph: nx.DiGraph = nx.DiGraph()
        digraph.add_nodes_from(nodes)
        for node_id, deps in depends_on:
            for dep in deps:
                if dep in digraph:
                    digraph.add_edge(dep, node_id)
        return cls(digraph)

    @property
    def nodes(self) -> list[int]:
        return list(self.digraph.nodes)

    def has_node(self, node_id: int) -> bool:
        return node_id in self.digraph

    def depends_on(self, node_id: int) -> list[int]:
        if node_id not in self.digraph:
            return []
        return list(self.digraph.predecessors(node_id))

    def depended_by(self, node_id: int) -> list[int]:
        if node_id not in self.digraph:
            return []
        return list(self.digraph.successors(node_id))

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self.digraph)

    def cycles(self) -> list[tuple[int, ...]]:
        """Groups of nodes that sit on a dependency cycle, each sorted.

        Strongly connected components with more than one node, plus
        self-dependent nodes, in a deterministic order.
        """
        groups: list[tuple[int, ...]] = []
        for component in nx.strongly_connected_components(self.digraph):
            if len(component) > 1:
                groups.append(tuple(sorted(component)))
        for node_id, _ in nx.selfloop_edges(self.digraph):
            groups.append((node_id,))
        groups.sort()
        return groups


def build_task_graph(tasks: Sequence[Task]) -> DependencyGraph:
    """Intra-batch task graph: only dependencies on tasks in ``tasks`` survive."""
    return DependencyGraph.from_pairs(
        (t.number for t in tasks),
        ((t.number, t.depends_on) for t in tasks),
    )


def build_batch_graph(batches: Sequence[Batch]) -> DependencyGraph:
    """Batch-level graph over the epic's batch numbers."""
    return DependencyGraph.from_pairs(
        (b.number for b in batches),
        ((b.number, b.depends_on) for b in batches),
    )

