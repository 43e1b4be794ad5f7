"""
Task Nodes — human work items and their escalation targets.

Tasks and approvals may carry an SLA. When ``sla.escalationEnabled``
is set they expose an extra ``bottom-escalation`` output which routes
overdue work to an escalation node.
"""

from __future__ import annotations

from workflow_designer.workflow.nodes.base import (
    ESCALATION_HANDLE,
    UNLIMITED,
    BaseNode,
    Handle,
    register_node,
)
from workflow_designer.workflow.workflow_model import NodeType


# ============================================================================
# Task
# ============================================================================


@register_node
class TaskNode(BaseNode):
    """A unit of work assigned to users, groups or roles."""

    node_type = NodeType.TASK
    label = "Task"
    description = "Work item assigned to one or more assignees"
    category = "task"
    icon = "📋"
    color = "#3b82f6"

    max_incoming = 1
    max_outgoing = 1
    escalation_extra_outgoing = 1

    output_handles = [
        Handle(id="right", label="Next", max_connections=1),
        Handle(
            id=ESCALATION_HANDLE,
            label="Escalation",
            description="Taken when the SLA is breached",
            max_connections=1,
            requires_escalation=True,
        ),
    ]


# ============================================================================
# Approval
# ============================================================================


@register_node
class ApprovalNode(BaseNode):
    """Approve / reject decision made by an assignee.

    Outgoing edges are budgeted per handle: one approved path, one
    rejected path and, with escalation enabled, one escalation path.
    """

    node_type = NodeType.APPROVAL
    label = "Approval"
    description = "Approve or reject decision"
    category = "task"
    icon = "✅"
    color = "#8b5cf6"

    max_incoming = 1
    max_outgoing = 2
    escalation_extra_outgoing = 1
    handle_governed_outgoing = True

    output_handles = [
        Handle(id="right-approved", label="Approved", max_connections=1),
        Handle(id="bottom-rejected", label="Rejected", max_connections=1),
        Handle(
            id=ESCALATION_HANDLE,
            label="Escalation",
            description="Taken when the SLA is breached",
            max_connections=1,
            requires_escalation=True,
        ),
    ]
    strict_output_handles = True


# ============================================================================
# Escalation
# ============================================================================


@register_node
class EscalationNode(BaseNode):
    """Collects overdue work from any number of SLA-enabled nodes."""

    node_type = NodeType.ESCALATION
    label = "Escalation"
    description = "Handles SLA breaches escalated from tasks and approvals"
    category = "task"
    icon = "🚨"
    color = "#f97316"

    max_incoming = UNLIMITED
    max_outgoing = 1
