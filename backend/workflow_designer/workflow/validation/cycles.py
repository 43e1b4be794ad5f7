"""
Cycle Detection — depth-first search over the workflow graph.

The search runs from every node in document order, tracking the current
DFS path. A non-tree edge into a node still on the path is a back edge
and records the path from that node to the current one, closed by the
node again. Fully visited nodes are never re-expanded, so a cycle is
reported once, from the first root that reaches it. Overlapping cycles
yield one representative per back edge, not every simple cycle.
"""

from __future__ import annotations

from logging import getLogger
from typing import List, Optional, Sequence, Set, Tuple

import networkx as nx

from workflow_designer.workflow.workflow_model import WorkflowEdge, WorkflowNode

logger = getLogger(__name__)


def build_graph(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> nx.DiGraph:
    """Directed snapshot in document order. Edges touching unknown node ids are skipped."""
    g = nx.DiGraph()
    g.add_nodes_from(n.id for n in nodes)
    g.add_edges_from(
        (e.source, e.target) for e in edges
        if e.source in g and e.target in g
    )
    return g


def find_cycles(g: nx.DiGraph) -> List[List[str]]:
    """Return each detected cycle as ``[n0, n1, …, n0]``."""
    cycles: List[List[str]] = []
    seen: Set[Tuple[str, ...]] = set()
    path: List[str] = []
    on_path: Set[str] = set()

    for u, v, kind in nx.dfs_labeled_edges(g):
        if kind == "forward":
            path.append(v)
            on_path.add(v)
        elif kind.startswith("reverse"):
            if path and path[-1] == v:
                path.pop()
                on_path.discard(v)
        elif kind == "nontree" and v in on_path:
            cycle = path[path.index(v):] + [v]
            key = tuple(cycle)
            if key not in seen:
                seen.add(key)
                cycles.append(cycle)

    return cycles


def detect_cycles(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> List[List[str]]:
    return find_cycles(build_graph(nodes, edges))


def would_create_cycle(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    source_id: str,
    target_id: str,
) -> Optional[List[str]]:
    """Simulate adding ``source → target`` and return a cycle in the result.

    The loop closed by the new edge is preferred. When the edge closes
    none but the graph already holds a cycle, the first detected cycle
    is returned. ``None`` means the simulated graph is acyclic.
    """
    g = build_graph(nodes, edges)
    if source_id not in g or target_id not in g:
        return None
    g.add_edge(source_id, target_id)

    if nx.has_path(g, target_id, source_id):
        loop = [source_id] + nx.shortest_path(g, target_id, source_id)
        logger.debug(f"Edge {source_id} → {target_id} closes loop {loop}")
        return loop

    cycles = find_cycles(g)
    if cycles:
        logger.debug(f"Edge {source_id} → {target_id} added to a graph with cycle {cycles[0]}")
        return cycles[0]
    return None
