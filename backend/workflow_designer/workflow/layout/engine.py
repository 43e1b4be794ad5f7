"""
Layout Engine — compute node positions for a workflow snapshot.

Entry points:
    layout_nodes()     run one named strategy
    auto_layout()      pick a strategy from graph size and density
    validate_layout()  overlap / envelope diagnostics
    LayoutSession      one-layout-at-a-time guard for a canvas

Every entry point is snapshot-in / result-out: input nodes are never
mutated, and edges are passed through untouched.

Usage::

    result = await auto_layout(nodes, edges)
    canvas.set_nodes(result.nodes)
"""

from __future__ import annotations

import math
from logging import getLogger
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import Field, ValidationError

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.layout.base import (
    LayoutAlgorithm,
    LayoutGraph,
    LayoutOptions,
    Point,
    get_strategy,
)
from workflow_designer.workflow.layout.measure import node_dimensions
from workflow_designer.workflow.workflow_model import (
    CamelModel,
    Position,
    WorkflowEdge,
    WorkflowNode,
)

logger = getLogger(__name__)

OptionsLike = Union[LayoutOptions, Dict[str, Any], None]


class LayoutResult(CamelModel):
    """Positioned nodes, the untouched edges and the strategy that ran."""

    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    algorithm: LayoutAlgorithm = LayoutAlgorithm.LAYERED


class LayoutDiagnostics(CamelModel):
    is_valid: bool = True
    issues: List[str] = Field(default_factory=list)


def _resolve_options(options: OptionsLike, config: LayoutConfig) -> LayoutOptions:
    if options is None:
        return LayoutOptions.from_config(config)
    if isinstance(options, dict):
        try:
            options = LayoutOptions.model_validate(options)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid layout options {options}: {e}")
            return LayoutOptions.from_config(config)
    return options.resolve(config)


# ============================================================================
# Strategy selection
# ============================================================================


def select_algorithm(
    node_count: int,
    edge_count: int,
    config: Optional[LayoutConfig] = None,
) -> LayoutAlgorithm:
    """Pick a strategy from graph size and edge density.

    Small graphs and dense graphs read best hierarchically; large sparse
    graphs get the force-directed strategy.
    """
    config = config or LayoutConfig.get_default_instance()
    complexity = edge_count / max(node_count, 1)

    if node_count <= config.auto_small_graph_max_nodes:
        return LayoutAlgorithm.LAYERED
    if complexity > config.auto_dense_complexity:
        return LayoutAlgorithm.LAYERED
    if node_count > config.auto_large_graph_min_nodes:
        return LayoutAlgorithm.FORCE
    return LayoutAlgorithm.LAYERED


# ============================================================================
# Layout
# ============================================================================


def _check_centers(centers: Dict[str, Point], graph: LayoutGraph) -> None:
    for nid in graph.node_ids:
        point = centers.get(nid)
        if point is None:
            raise ValueError(f"strategy returned no position for node '{nid}'")
        if not (math.isfinite(point[0]) and math.isfinite(point[1])):
            raise ValueError(f"strategy returned a non-finite position for node '{nid}'")


async def _run_strategy(
    algorithm: LayoutAlgorithm,
    graph: LayoutGraph,
    options: LayoutOptions,
    config: LayoutConfig,
) -> Dict[str, Point]:
    strategy = get_strategy(algorithm)
    if strategy is None:
        raise LookupError(f"no layout strategy registered for '{algorithm.value}'")
    centers = await strategy.compute(graph, options, config)
    _check_centers(centers, graph)
    return centers


async def _compute_centers(
    algorithm: LayoutAlgorithm,
    graph: LayoutGraph,
    options: LayoutOptions,
    config: LayoutConfig,
) -> Tuple[Optional[Dict[str, Point]], LayoutAlgorithm]:
    if algorithm != LayoutAlgorithm.LAYERED:
        try:
            return await _run_strategy(algorithm, graph, options, config), algorithm
        except Exception as e:
            logger.warning(
                f"{algorithm.value} layout failed, falling back to layered: {e}"
            )

    try:
        centers = await _run_strategy(LayoutAlgorithm.LAYERED, graph, options, config)
        return centers, LayoutAlgorithm.LAYERED
    except Exception as e:
        logger.error(f"Layered layout failed, keeping current positions: {e}")
        return None, LayoutAlgorithm.LAYERED


def _place(
    nodes: Sequence[WorkflowNode],
    centers: Dict[str, Point],
    margin: float,
) -> List[WorkflowNode]:
    """Convert centers to top-left positions, offset so the drawing starts at ``margin``."""
    corners: List[Tuple[float, float]] = []
    for node in nodes:
        width, height = node_dimensions(node)
        cx, cy = centers[node.id]
        corners.append((cx - width / 2, cy - height / 2))

    dx = margin - min(x for x, _ in corners)
    dy = margin - min(y for _, y in corners)
    return [
        node.model_copy(update={"position": Position(x=x + dx, y=y + dy)})
        for node, (x, y) in zip(nodes, corners)
    ]


async def layout_nodes(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    algorithm: Union[LayoutAlgorithm, str, None] = LayoutAlgorithm.LAYERED,
    options: OptionsLike = None,
    config: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """Position ``nodes`` with the requested strategy.

    A failing force or stress run falls back to layered. If layered fails
    too, the nodes come back with their current positions. Invalid config
    values and option dicts fall back to their defaults.
    """
    config = (config or LayoutConfig.get_default_instance()).sanitized()
    algorithm = LayoutAlgorithm.parse(algorithm)

    if not nodes:
        return LayoutResult(nodes=[], edges=list(edges), algorithm=algorithm)

    resolved = _resolve_options(options, config)
    graph = LayoutGraph.from_snapshot(nodes, edges)
    centers, used = await _compute_centers(algorithm, graph, resolved, config)

    if centers is None:
        placed = [node.model_copy() for node in nodes]
    else:
        placed = _place(nodes, centers, config.margin)

    logger.info(
        f"Laid out {len(nodes)} nodes / {len(edges)} edges with {used.value} "
        f"({resolved.direction.value})"
    )
    return LayoutResult(nodes=placed, edges=list(edges), algorithm=used)


async def auto_layout(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    options: OptionsLike = None,
    config: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """Lay out with the strategy ``select_algorithm`` picks for this graph.

    ``result.algorithm`` names the strategy that actually produced the
    positions, which is layered after a fallback.
    """
    config = config or LayoutConfig.get_default_instance()
    algorithm = select_algorithm(len(nodes), len(edges), config)
    logger.debug(f"Auto layout selected {algorithm.value} for {len(nodes)} nodes")
    return await layout_nodes(nodes, edges, algorithm, options, config)


# ============================================================================
# Diagnostics
# ============================================================================


def validate_layout(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    config: Optional[LayoutConfig] = None,
) -> LayoutDiagnostics:
    """Report overlapping nodes and nodes outside the canvas envelope.

    Each box is grown by half the overlap padding on every side, so two
    nodes are flagged when they are closer than the padding.
    """
    config = config or LayoutConfig.get_default_instance()
    half = config.overlap_padding / 2
    issues: List[str] = []

    boxes = []
    for node in nodes:
        width, height = node_dimensions(node)
        x, y = node.position.x, node.position.y
        boxes.append((node, x - half, y - half, x + width + half, y + height + half))

    for i in range(len(boxes)):
        a, ax0, ay0, ax1, ay1 = boxes[i]
        for j in range(i + 1, len(boxes)):
            b, bx0, by0, bx1, by1 = boxes[j]
            if ax0 < bx1 and bx0 < ax1 and ay0 < by1 and by0 < ay1:
                issues.append(f"Nodes \"{a.label}\" and \"{b.label}\" are overlapping")

    low, high = config.bounds_min, config.bounds_max
    for node in nodes:
        x, y = node.position.x, node.position.y
        if x < low or x > high or y < low or y > high:
            issues.append(f"Node \"{node.label}\" is positioned outside reasonable bounds")

    return LayoutDiagnostics(is_valid=not issues, issues=issues)


# ============================================================================
# Session guard
# ============================================================================


class LayoutSession:
    """Serialise layout requests for one canvas.

    A request arriving while another is still computing is dropped
    (``run`` returns ``None``); the host re-triggers once the first
    result has been applied.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config
        self._busy = False

    @property
    def is_layouting(self) -> bool:
        return self._busy

    async def run(
        self,
        nodes: Sequence[WorkflowNode],
        edges: Sequence[WorkflowEdge],
        algorithm: Union[LayoutAlgorithm, str, None] = None,
        options: OptionsLike = None,
    ) -> Optional[LayoutResult]:
        """Lay out with ``algorithm``, or auto-select when it is ``None``."""
        if self._busy:
            logger.debug("Layout already in progress, ignoring request")
            return None
        self._busy = True
        try:
            if algorithm is None:
                return await auto_layout(nodes, edges, options, self._config)
            return await layout_nodes(nodes, edges, algorithm, options, self._config)
        finally:
            self._busy = False
