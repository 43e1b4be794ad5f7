"""
Stress Layout — SMACOF stress majorisation.

Ideal distances are shortest-path hop counts on the undirected graph,
scaled to node size plus spacing. Disconnected pairs sit one hop beyond
the graph diameter. Weights are ``d⁻²``.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import Dict

import networkx as nx
import numpy as np

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.layout.base import (
    LayoutAlgorithm,
    LayoutGraph,
    LayoutOptions,
    LayoutStrategy,
    Point,
    register_strategy,
)
from workflow_designer.workflow.layout.force import to_networkx, unit_length

logger = getLogger(__name__)

YIELD_EVERY = 10


def ideal_distances(graph: LayoutGraph) -> np.ndarray:
    """Hop-count matrix in ``graph.node_ids`` order."""
    g = to_networkx(graph).to_undirected()
    index = {nid: i for i, nid in enumerate(graph.node_ids)}
    n = len(graph.node_ids)
    dist = np.full((n, n), np.inf)
    for source, lengths in nx.all_pairs_shortest_path_length(g):
        for target, hops in lengths.items():
            dist[index[source], index[target]] = hops
    finite = dist[np.isfinite(dist)]
    diameter = finite.max() if finite.size else 0.0
    dist[~np.isfinite(dist)] = diameter + 1
    np.fill_diagonal(dist, 0.0)
    return dist


def stress(x: np.ndarray, dist: np.ndarray, weights: np.ndarray) -> float:
    diff = x[:, None, :] - x[None, :, :]
    actual = np.sqrt((diff ** 2).sum(axis=-1))
    return float((np.triu(weights * (actual - dist) ** 2, k=1)).sum())


@register_strategy
class StressLayout(LayoutStrategy):
    algorithm = LayoutAlgorithm.STRESS

    async def compute(
        self,
        graph: LayoutGraph,
        options: LayoutOptions,
        config: LayoutConfig,
    ) -> Dict[str, Point]:
        n = len(graph)
        if n == 1:
            return {graph.node_ids[0]: (0.0, 0.0)}

        dist = ideal_distances(graph) * unit_length(graph, options.spacing.node)
        weights = np.zeros_like(dist)
        off_diagonal = dist > 0
        weights[off_diagonal] = 1.0 / dist[off_diagonal] ** 2

        # V is the weighted Laplacian; its pseudo-inverse drives the update
        v = -weights.copy()
        np.fill_diagonal(v, weights.sum(axis=1))
        v_pinv = np.linalg.pinv(v)

        rng = np.random.default_rng(config.force_seed)
        x = rng.uniform(-1.0, 1.0, size=(n, 2)) * dist.max()
        previous = stress(x, dist, weights)

        for iteration in range(1, config.stress_iterations + 1):
            diff = x[:, None, :] - x[None, :, :]
            actual = np.sqrt((diff ** 2).sum(axis=-1))
            ratio = np.zeros_like(actual)
            nonzero = actual > 1e-12
            ratio[nonzero] = dist[nonzero] / actual[nonzero]
            b = -weights * ratio
            np.fill_diagonal(b, 0.0)
            np.fill_diagonal(b, -b.sum(axis=1))
            x = v_pinv @ (b @ x)

            current = stress(x, dist, weights)
            if previous > 0 and (previous - current) / previous < config.stress_epsilon:
                logger.debug(f"Stress layout converged after {iteration} iterations")
                break
            previous = current
            if iteration % YIELD_EVERY == 0:
                await asyncio.sleep(0)

        return {
            nid: (float(x[i, 0]), float(x[i, 1]))
            for i, nid in enumerate(graph.node_ids)
        }
