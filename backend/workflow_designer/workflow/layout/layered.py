"""
Layered Layout — hierarchical (Sugiyama-style) placement.

Phases:
    1. Cycle breaking  — DFS back edges are reversed.
    2. Ranking         — longest path from the sources.
    3. Normalisation   — edges spanning several ranks get virtual nodes.
    4. Ordering        — barycenter layer sweeps, best crossing count kept.
    5. Coordinates     — ranks packed along the flow axis; nodes aligned to
                         their neighbours on the cross axis (``align``).
    6. Direction       — the canonical top-to-bottom frame is rotated or
                         mirrored to the requested direction.

Pure and deterministic: node order in the input decides every tie.
"""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import Dict, Iterator, List, Set, Tuple

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.layout.base import (
    LayoutAlgorithm,
    LayoutAlign,
    LayoutGraph,
    LayoutOptions,
    LayoutStrategy,
    Point,
    register_strategy,
)

logger = getLogger(__name__)

SWEEP_ROUNDS = 4

Link = Tuple[str, str]


@register_strategy
class LayeredLayout(LayoutStrategy):
    """Default strategy; always available as the fallback."""

    algorithm = LayoutAlgorithm.LAYERED

    async def compute(
        self,
        graph: LayoutGraph,
        options: LayoutOptions,
        config: LayoutConfig,
    ) -> Dict[str, Point]:
        return self.compute_sync(graph, options)

    def compute_sync(self, graph: LayoutGraph, options: LayoutOptions) -> Dict[str, Point]:
        if not graph.node_ids:
            return {}

        links = break_cycles(graph.node_ids, graph.links)
        ranks = assign_ranks(graph.node_ids, links)
        layers, up, down, virtual = _normalise(graph.node_ids, links, ranks)
        layers = _minimise_crossings(layers, up, down)

        horizontal = options.direction.is_horizontal
        depth_size: Dict[str, float] = {}
        breadth_size: Dict[str, float] = {}
        for nid in graph.node_ids:
            width, height = graph.sizes[nid]
            depth_size[nid] = width if horizontal else height
            breadth_size[nid] = height if horizontal else width
        for nid in virtual:
            depth_size[nid] = 0.0
            breadth_size[nid] = 0.0

        depth = _rank_depths(layers, depth_size, options.spacing.rank)
        breadth = _assign_breadth(
            layers, up, down, breadth_size, options.spacing.node, options.align,
        )

        sign = -1.0 if options.direction.is_reversed else 1.0
        centers: Dict[str, Point] = {}
        for nid in graph.node_ids:
            d = sign * depth[nid]
            b = breadth[nid]
            centers[nid] = (d, b) if horizontal else (b, d)
        return centers


# ============================================================================
# Phase 1–2: acyclic orientation and ranking
# ============================================================================


def break_cycles(node_ids: List[str], links: List[Link]) -> List[Link]:
    """Reverse every DFS back edge so the link set becomes acyclic."""
    adjacency: Dict[str, List[str]] = defaultdict(list)
    for s, t in links:
        adjacency[s].append(t)

    back: Set[Link] = set()
    visited: Set[str] = set()
    on_stack: Set[str] = set()
    for root in node_ids:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(adjacency[root]))]
        while stack:
            node, neighbors = stack[-1]
            descended = False
            for nxt in neighbors:
                if nxt in on_stack:
                    back.add((node, nxt))
                elif nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    stack.append((nxt, iter(adjacency[nxt])))
                    descended = True
                    break
            if not descended:
                stack.pop()
                on_stack.discard(node)

    oriented: List[Link] = []
    seen: Set[Link] = set()
    for s, t in links:
        pair = (t, s) if (s, t) in back else (s, t)
        if pair not in seen:
            seen.add(pair)
            oriented.append(pair)
    if back:
        logger.debug(f"Layered layout reversed {len(back)} back edge(s)")
    return oriented


def assign_ranks(node_ids: List[str], links: List[Link]) -> Dict[str, int]:
    """Longest path from the sources over an acyclic link set."""
    preds: Dict[str, List[str]] = defaultdict(list)
    succs: Dict[str, List[str]] = defaultdict(list)
    indegree = {nid: 0 for nid in node_ids}
    for s, t in links:
        preds[t].append(s)
        succs[s].append(t)
        indegree[t] += 1

    ranks: Dict[str, int] = {}
    ready = [nid for nid in node_ids if indegree[nid] == 0]
    while ready:
        nid = ready.pop(0)
        ranks[nid] = max((ranks[p] + 1 for p in preds[nid]), default=0)
        for nxt in succs[nid]:
            indegree[nxt] -= 1
            if indegree[nxt] == 0:
                ready.append(nxt)
    return ranks


# ============================================================================
# Phase 3: virtual nodes
# ============================================================================


def _normalise(
    node_ids: List[str],
    links: List[Link],
    ranks: Dict[str, int],
) -> Tuple[List[List[str]], Dict[str, List[str]], Dict[str, List[str]], Set[str]]:
    """Split long edges so every link joins adjacent ranks."""
    height = max(ranks.values()) + 1
    layers: List[List[str]] = [[] for _ in range(height)]
    for nid in node_ids:
        layers[ranks[nid]].append(nid)

    up: Dict[str, List[str]] = defaultdict(list)
    down: Dict[str, List[str]] = defaultdict(list)
    virtual: Set[str] = set()

    for s, t in links:
        prev = s
        for r in range(ranks[s] + 1, ranks[t]):
            dummy = f"\x00{s}\x00{t}\x00{r}"
            virtual.add(dummy)
            layers[r].append(dummy)
            down[prev].append(dummy)
            up[dummy].append(prev)
            prev = dummy
        down[prev].append(t)
        up[t].append(prev)

    return layers, up, down, virtual


# ============================================================================
# Phase 4: crossing minimisation
# ============================================================================


def _count_crossings(
    upper: List[str],
    lower: List[str],
    down: Dict[str, List[str]],
) -> int:
    pos = {nid: i for i, nid in enumerate(lower)}
    segments = [
        (i, pos[t])
        for i, s in enumerate(upper)
        for t in down.get(s, [])
        if t in pos
    ]
    crossings = 0
    for a in range(len(segments)):
        ua, la = segments[a]
        for b in range(a + 1, len(segments)):
            ub, lb = segments[b]
            if (ua - ub) * (la - lb) < 0:
                crossings += 1
    return crossings


def total_crossings(layers: List[List[str]], down: Dict[str, List[str]]) -> int:
    return sum(
        _count_crossings(layers[r], layers[r + 1], down)
        for r in range(len(layers) - 1)
    )


def _reorder(layer: List[str], fixed: List[str], neighbors: Dict[str, List[str]]) -> List[str]:
    pos = {nid: i for i, nid in enumerate(fixed)}

    def barycenter(item: Tuple[int, str]) -> Tuple[float, int]:
        idx, nid = item
        linked = [pos[n] for n in neighbors.get(nid, []) if n in pos]
        if not linked:
            return float(idx), idx
        return sum(linked) / len(linked), idx

    return [nid for _, nid in sorted(enumerate(layer), key=barycenter)]


def _minimise_crossings(
    layers: List[List[str]],
    up: Dict[str, List[str]],
    down: Dict[str, List[str]],
) -> List[List[str]]:
    best = [list(layer) for layer in layers]
    best_score = total_crossings(best, down)
    current = [list(layer) for layer in layers]

    for _ in range(SWEEP_ROUNDS):
        if best_score == 0:
            break
        for r in range(1, len(current)):
            current[r] = _reorder(current[r], current[r - 1], up)
        for r in range(len(current) - 2, -1, -1):
            current[r] = _reorder(current[r], current[r + 1], down)
        score = total_crossings(current, down)
        if score < best_score:
            best_score = score
            best = [list(layer) for layer in current]

    return best


# ============================================================================
# Phase 5: coordinates
# ============================================================================


def _rank_depths(
    layers: List[List[str]],
    depth_size: Dict[str, float],
    rank_spacing: float,
) -> Dict[str, float]:
    depth: Dict[str, float] = {}
    cursor = 0.0
    for layer in layers:
        thickness = max((depth_size[n] for n in layer), default=0.0)
        center = cursor + thickness / 2
        for nid in layer:
            depth[nid] = center
        cursor += thickness + rank_spacing
    return depth


def _pack(layer: List[str], size: Dict[str, float], spacing: float) -> Dict[str, float]:
    total = sum(size[n] for n in layer) + spacing * max(len(layer) - 1, 0)
    cursor = -total / 2
    out: Dict[str, float] = {}
    for nid in layer:
        out[nid] = cursor + size[nid] / 2
        cursor += size[nid] + spacing
    return out


def _assign_breadth(
    layers: List[List[str]],
    up: Dict[str, List[str]],
    down: Dict[str, List[str]],
    size: Dict[str, float],
    spacing: float,
    align: LayoutAlign,
) -> Dict[str, float]:
    """Place each rank along the cross axis, pulled toward its neighbours.

    Ranks are visited away from the reference side (U: top down using
    predecessors, D: bottom up using successors). Collisions are resolved
    from the L or R end of the rank, then the rank is shifted so its mean
    offset from the desired positions is zero.
    """
    breadth: Dict[str, float] = {}
    for layer in layers:
        breadth.update(_pack(layer, size, spacing))

    from_upper = align.value[0] == "U"
    from_left = align.value[1] == "L"
    order = range(1, len(layers)) if from_upper else range(len(layers) - 2, -1, -1)
    reference = up if from_upper else down

    for r in order:
        layer = layers[r]
        desired: Dict[str, float] = {}
        for nid in layer:
            linked = [breadth[n] for n in reference.get(nid, []) if n in breadth]
            desired[nid] = sum(linked) / len(linked) if linked else breadth[nid]

        placed: Dict[str, float] = {}
        sequence = layer if from_left else list(reversed(layer))
        prev = None
        for nid in sequence:
            target = desired[nid]
            if prev is not None:
                gap = (size[prev] + size[nid]) / 2 + spacing
                if from_left:
                    target = max(target, placed[prev] + gap)
                else:
                    target = min(target, placed[prev] - gap)
            placed[nid] = target
            prev = nid

        shift = sum(placed[n] - desired[n] for n in layer) / len(layer) if layer else 0.0
        for nid in layer:
            breadth[nid] = placed[nid] - shift

    return breadth
