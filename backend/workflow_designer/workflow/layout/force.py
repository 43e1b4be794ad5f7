"""
Force Layout — Fruchterman–Reingold placement via networkx.

networkx works in a unit box; the result is rescaled so the average edge
is about one node plus the node spacing long.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import Dict

import networkx as nx

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.layout.base import (
    LayoutAlgorithm,
    LayoutGraph,
    LayoutOptions,
    LayoutStrategy,
    Point,
    register_strategy,
)

logger = getLogger(__name__)


def to_networkx(graph: LayoutGraph) -> nx.DiGraph:
    g = nx.DiGraph()
    g.add_nodes_from(graph.node_ids)
    g.add_edges_from(graph.links)
    return g


def unit_length(graph: LayoutGraph, spacing: float) -> float:
    """Target edge length: mean node extent plus spacing."""
    if not graph.sizes:
        return spacing
    extent = sum(max(w, h) for w, h in graph.sizes.values()) / len(graph.sizes)
    return extent + spacing


@register_strategy
class ForceLayout(LayoutStrategy):
    algorithm = LayoutAlgorithm.FORCE

    async def compute(
        self,
        graph: LayoutGraph,
        options: LayoutOptions,
        config: LayoutConfig,
    ) -> Dict[str, Point]:
        if len(graph) == 1:
            return {graph.node_ids[0]: (0.0, 0.0)}
        return await asyncio.to_thread(self._run, graph, options, config)

    def _run(
        self,
        graph: LayoutGraph,
        options: LayoutOptions,
        config: LayoutConfig,
    ) -> Dict[str, Point]:
        g = to_networkx(graph).to_undirected()
        raw = nx.spring_layout(
            g,
            iterations=config.force_iterations,
            seed=config.force_seed,
        )

        target = unit_length(graph, options.spacing.node)
        lengths = [
            ((raw[s][0] - raw[t][0]) ** 2 + (raw[s][1] - raw[t][1]) ** 2) ** 0.5
            for s, t in g.edges()
        ]
        mean = sum(lengths) / len(lengths) if lengths else 0.0
        if mean <= 1e-9:
            # No edges: spread the unit box over one target length per node
            mean = 2.0 / max(len(graph), 1) ** 0.5
        scale = target / mean

        logger.debug(f"Force layout: {len(graph)} nodes, scale {scale:.1f}")
        return {
            nid: (float(raw[nid][0]) * scale, float(raw[nid][1]) * scale)
            for nid in graph.node_ids
        }
