"""
Node measurement — default on-canvas sizes per node type.
"""

from __future__ import annotations

from typing import Tuple, Union

from workflow_designer.workflow.workflow_model import NodeType, Size, WorkflowNode

NODE_WIDTH = 180
NODE_HEIGHT = 80
MAX_NODE_WIDTH = 250
CHAR_WIDTH = 8


def measure_node(node_type: Union[NodeType, str], label: str = "") -> Size:
    """Rough size estimate from the node type and label length."""
    kind = node_type.value if isinstance(node_type, NodeType) else str(node_type)
    if kind in ("start", "end"):
        return Size(width=120, height=60)
    if kind == "condition":
        return Size(width=160, height=100)
    if kind in ("parallel", "merge"):
        return Size(width=140, height=70)
    label_width = max(len(label) * CHAR_WIDTH, NODE_WIDTH)
    return Size(width=min(label_width, MAX_NODE_WIDTH), height=NODE_HEIGHT)


def node_dimensions(node: WorkflowNode) -> Tuple[float, float]:
    """Measured size when the host supplied one, else the type default."""
    size = node.size or measure_node(node.node_type, node.data.label)
    return float(size.width), float(size.height)
