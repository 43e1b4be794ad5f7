"""
Layout — automatic positioning of workflow nodes.

Importing this package registers the layered, force and stress strategies.
"""

from workflow_designer.workflow.layout.base import (
    LayoutAlgorithm,
    LayoutAlign,
    LayoutDirection,
    LayoutGraph,
    LayoutOptions,
    LayoutSpacing,
    LayoutStrategy,
    get_strategy,
    list_strategies,
    register_strategy,
)
from workflow_designer.workflow.layout.measure import measure_node, node_dimensions

# Strategy modules register themselves on import
from workflow_designer.workflow.layout import layered as _layered  # noqa: F401
from workflow_designer.workflow.layout import force as _force  # noqa: F401
from workflow_designer.workflow.layout import stress as _stress  # noqa: F401

from workflow_designer.workflow.layout.engine import (
    LayoutDiagnostics,
    LayoutResult,
    LayoutSession,
    auto_layout,
    layout_nodes,
    select_algorithm,
    validate_layout,
)

__all__ = [
    "LayoutAlgorithm",
    "LayoutAlign",
    "LayoutDirection",
    "LayoutGraph",
    "LayoutOptions",
    "LayoutSpacing",
    "LayoutStrategy",
    "LayoutDiagnostics",
    "LayoutResult",
    "LayoutSession",
    "auto_layout",
    "get_strategy",
    "layout_nodes",
    "list_strategies",
    "measure_node",
    "node_dimensions",
    "register_strategy",
    "select_algorithm",
    "validate_layout",
]
