"""
Logic Nodes — branching, fan-out and join.

These nodes carry no assignees; they shape the control flow. Their
handles are strict: an edge must name one of the declared handles.
"""

from __future__ import annotations

from workflow_designer.workflow.nodes.base import (
    UNLIMITED,
    BaseNode,
    Handle,
    register_node,
)
from workflow_designer.workflow.workflow_model import NodeType


# ============================================================================
# Condition — boolean branch
# ============================================================================


@register_node
class ConditionNode(BaseNode):
    """Route to the true or the false path based on configured conditions."""

    node_type = NodeType.CONDITION
    label = "Condition"
    description = "Branch on a true / false decision"
    category = "logic"
    icon = "🔀"
    color = "#eab308"

    max_incoming = 1
    max_outgoing = 2

    output_handles = [
        Handle(id="right-true", label="True", max_connections=1),
        Handle(id="bottom-false", label="False", max_connections=1),
    ]
    strict_output_handles = True


# ============================================================================
# Parallel — fan-out
# ============================================================================


@register_node
class ParallelNode(BaseNode):
    """Split execution into concurrently running branches.

    All branches leave through the single ``right`` handle.
    """

    node_type = NodeType.PARALLEL
    label = "Parallel"
    description = "Split into parallel branches"
    category = "logic"
    icon = "⑂"
    color = "#06b6d4"

    max_incoming = 1
    max_outgoing = UNLIMITED

    output_handles = [Handle(id="right", label="Branches")]
    strict_output_handles = True


# ============================================================================
# Merge — join
# ============================================================================


@register_node
class MergeNode(BaseNode):
    """Join parallel branches according to its merge configuration."""

    node_type = NodeType.MERGE
    label = "Merge"
    description = "Wait for parallel branches and continue"
    category = "logic"
    icon = "⛙"
    color = "#06b6d4"

    max_incoming = UNLIMITED
    max_outgoing = 1

    input_handles = [Handle(id="left", label="Branches")]
    strict_input_handles = True
