"""
Flow Nodes — entry and terminal points of a workflow.

A workflow has exactly one start node and at least one terminal
(end or archive) node. Terminals accept a single incoming edge and
never emit one.
"""

from __future__ import annotations

from workflow_designer.workflow.nodes.base import BaseNode, Handle, register_node
from workflow_designer.workflow.workflow_model import NodeType


@register_node
class StartNode(BaseNode):
    """Workflow entry point. Never a connection target."""

    node_type = NodeType.START
    label = "Start"
    description = "Entry point of the workflow"
    category = "flow"
    icon = "▶️"
    color = "#22c55e"

    max_incoming = 0
    max_outgoing = 1

    input_handles = []
    output_handles = [Handle(id="right", label="Out")]


@register_node
class EndNode(BaseNode):
    node_type = NodeType.END
    label = "End"
    description = "Terminates the workflow"
    category = "flow"
    icon = "⏹️"
    color = "#ef4444"

    max_incoming = 1
    max_outgoing = 0

    output_handles = []


@register_node
class ArchiveNode(BaseNode):
    """Terminal node that archives the processed record."""

    node_type = NodeType.ARCHIVE
    label = "Archive"
    description = "Terminates the workflow and archives the record"
    category = "flow"
    icon = "🗄️"
    color = "#78716c"

    max_incoming = 1
    max_outgoing = 0

    output_handles = []
