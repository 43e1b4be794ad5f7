"""
Layout Base — options, the strategy interface and the strategy registry.

Strategies return node *centers* in an arbitrary coordinate frame; the
engine turns them into top-left-anchored canvas positions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from logging import getLogger
from typing import Dict, List, Optional, Sequence, Tuple, Type, Union

from pydantic import Field

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.layout.measure import node_dimensions
from workflow_designer.workflow.workflow_model import CamelModel, WorkflowEdge, WorkflowNode

logger = getLogger(__name__)

Point = Tuple[float, float]


class LayoutAlgorithm(str, Enum):
    LAYERED = "layered"
    FORCE = "force"
    STRESS = "stress"

    @classmethod
    def parse(cls, value: Optional[Union[str, "LayoutAlgorithm"]]) -> "LayoutAlgorithm":
        """Resolve a name, including the canvas' legacy engine names.

        Unknown names resolve to the layered default.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.LAYERED
        key = str(value).strip().lower()
        resolved = _ALGORITHM_ALIASES.get(key)
        if resolved is None:
            try:
                resolved = cls(key)
            except ValueError:
                logger.warning(f"Unknown layout algorithm '{value}', using layered")
                resolved = cls.LAYERED
        return resolved


_ALGORITHM_ALIASES = {
    "dagre": LayoutAlgorithm.LAYERED,
    "elk-layered": LayoutAlgorithm.LAYERED,
    "hierarchical": LayoutAlgorithm.LAYERED,
    "elk-force": LayoutAlgorithm.FORCE,
    "force-directed": LayoutAlgorithm.FORCE,
    "elk-stress": LayoutAlgorithm.STRESS,
    "stress-majorization": LayoutAlgorithm.STRESS,
}


class LayoutDirection(str, Enum):
    LR = "LR"
    RL = "RL"
    TB = "TB"
    BT = "BT"

    @property
    def is_horizontal(self) -> bool:
        return self in (LayoutDirection.LR, LayoutDirection.RL)

    @property
    def is_reversed(self) -> bool:
        return self in (LayoutDirection.RL, LayoutDirection.BT)


class LayoutAlign(str, Enum):
    """Brandes–Köpf style alignment.

    First letter: align with upper-rank (U) or lower-rank (D) neighbours.
    Second letter: which side keeps its place when nodes collide.
    """
    UL = "UL"
    UR = "UR"
    DL = "DL"
    DR = "DR"


class LayoutSpacing(CamelModel):
    node: float = Field(default=50.0, ge=0)
    rank: float = Field(default=80.0, ge=0)


class LayoutOptions(CamelModel):
    direction: LayoutDirection = LayoutDirection.LR
    spacing: LayoutSpacing = Field(default_factory=LayoutSpacing)
    align: LayoutAlign = LayoutAlign.UL

    @classmethod
    def from_config(cls, config: LayoutConfig) -> "LayoutOptions":
        return cls(
            direction=LayoutDirection(config.default_direction),
            spacing=LayoutSpacing(node=config.node_spacing, rank=config.rank_spacing),
            align=LayoutAlign(config.align),
        )

    def resolve(self, config: LayoutConfig) -> "LayoutOptions":
        """Fill fields the caller did not set from ``config``."""
        base = LayoutOptions.from_config(config)
        spacing = base.spacing
        if "spacing" in self.model_fields_set:
            spacing = spacing.model_copy(
                update={k: getattr(self.spacing, k) for k in self.spacing.model_fields_set}
            )
        update = {k: getattr(self, k) for k in self.model_fields_set if k != "spacing"}
        update["spacing"] = spacing
        return base.model_copy(update=update)


# ============================================================================
# Strategy input
# ============================================================================


@dataclass
class LayoutGraph:
    """Topology and box sizes handed to a strategy.

    ``node_ids`` is duplicate-free. ``links`` holds each distinct
    ``(source, target)`` pair once, with self-loops and dangling
    references removed.
    """
    node_ids: List[str]
    sizes: Dict[str, Tuple[float, float]]
    links: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_snapshot(
        cls,
        nodes: Sequence[WorkflowNode],
        edges: Sequence[WorkflowEdge],
    ) -> "LayoutGraph":
        node_ids = list(dict.fromkeys(n.id for n in nodes))
        known = set(node_ids)
        links: List[Tuple[str, str]] = []
        seen = set()
        for e in edges:
            pair = (e.source, e.target)
            if e.source == e.target or pair in seen:
                continue
            if e.source in known and e.target in known:
                seen.add(pair)
                links.append(pair)
        return cls(
            node_ids=node_ids,
            sizes={n.id: node_dimensions(n) for n in nodes},
            links=links,
        )

    def __len__(self) -> int:
        return len(self.node_ids)


class LayoutStrategy(ABC):
    """One interchangeable layout algorithm."""

    algorithm: LayoutAlgorithm

    @abstractmethod
    async def compute(
        self,
        graph: LayoutGraph,
        options: LayoutOptions,
        config: LayoutConfig,
    ) -> Dict[str, Point]:
        """Return the center point of every node in ``graph``."""


# ============================================================================
# Registry
# ============================================================================

_strategies: Dict[LayoutAlgorithm, LayoutStrategy] = {}


def register_strategy(cls: Type[LayoutStrategy]) -> Type[LayoutStrategy]:
    _strategies[cls.algorithm] = cls()
    return cls


def get_strategy(algorithm: LayoutAlgorithm) -> Optional[LayoutStrategy]:
    return _strategies.get(algorithm)


def list_strategies() -> List[LayoutAlgorithm]:
    return list(_strategies)
