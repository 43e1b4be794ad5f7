"""
Pre-built Workflow Templates.

Factory functions returning ready-made ``WorkflowDefinition`` objects
for common business processes. Every template is structurally valid
and each edge uses the handles the connection validator expects, so a
template can be published as-is or cloned as a starting point.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from workflow_designer.workflow.workflow_model import (
    SLA,
    ApprovalConfig,
    Assignee,
    AssigneeType,
    Condition,
    ConditionOperator,
    MergeConfig,
    NodeType,
    Priority,
    TimeUnit,
    WorkflowDefinition,
    WorkflowEdge,
    WorkflowNode,
    WorkflowNodeData,
)


class _Builder:
    """Collects nodes and edges for one template."""

    def __init__(self) -> None:
        self.nodes: List[WorkflowNode] = []
        self.edges: List[WorkflowEdge] = []

    def add(self, ntype: NodeType, nid: str, label: str, x: float, y: float, **data: Any) -> None:
        self.nodes.append(WorkflowNode(
            id=nid, node_type=ntype, position={"x": x, "y": y},
            data=WorkflowNodeData(label=label, **data),
        ))

    def edge(self, src: str, tgt: str, handle: str = "right", lbl: str = "") -> None:
        self.edges.append(WorkflowEdge(
            id=f"e-{src}-{tgt}", source=src, target=tgt,
            source_handle=handle, target_handle="left", data={"label": lbl},
        ))


def _role(rid: str, name: str) -> List[Assignee]:
    return [Assignee(type=AssigneeType.ROLE, id=rid, name=name)]


# ============================================================================
# Leave Request
# ============================================================================


def create_leave_request_template() -> WorkflowDefinition:
    """Employee leave request with manager approval.

    Topology::
        Start → Raise Request → Approval Required
          approved → Sign Document → End
          rejected → Request Declined
        Raise Request ⇢ (SLA breach) HR Escalation → Escalation Closed
    """
    b = _Builder()

    b.add(NodeType.START, "start", "Start", 40, 200)
    b.add(
        NodeType.TASK, "raise-request", "Raise Request", 260, 190,
        task_type="link_document",
        assignees=[Assignee(type=AssigneeType.ROLE, id="employee", name="Employee")],
        sla=SLA(duration=1, unit=TimeUnit.WEEKS, escalation_enabled=True),
    )
    b.add(
        NodeType.APPROVAL, "manager-approval", "Approval Required", 520, 190,
        assignees=_role("line-manager", "Line Manager"),
        sla=SLA(duration=2, unit=TimeUnit.DAYS, warning_threshold=75),
        approval_config=ApprovalConfig(require_rejection_path=True),
    )
    b.add(
        NodeType.TASK, "sign-document", "Sign Document", 780, 190,
        task_type="sign_document",
        assignees=_role("hr", "HR"),
        sla=SLA(duration=3, unit=TimeUnit.DAYS),
    )
    b.add(NodeType.END, "end-approved", "End", 1040, 200)
    b.add(NodeType.END, "end-declined", "Request Declined", 780, 360)
    b.add(NodeType.ESCALATION, "hr-escalation", "HR Escalation", 260, 360)
    b.add(NodeType.END, "end-escalated", "Escalation Closed", 520, 360)

    b.edge("start", "raise-request", lbl="Submit")
    b.edge("raise-request", "manager-approval")
    b.edge("raise-request", "hr-escalation", handle="bottom-escalation", lbl="Overdue")
    b.edge("manager-approval", "sign-document", handle="right-approved", lbl="Approved")
    b.edge("manager-approval", "end-declined", handle="bottom-rejected", lbl="Rejected")
    b.edge("sign-document", "end-approved")
    b.edge("hr-escalation", "end-escalated")

    return WorkflowDefinition(
        id="template-leave-request",
        name="Leave Request Approval",
        description="Employee leave request approval workflow with manager and HR review",
        category="HR",
        priority=Priority.MEDIUM,
        tags=["template", "hr"],
        nodes=b.nodes,
        edges=b.edges,
        created_by="system",
    )


# ============================================================================
# Purchase Order
# ============================================================================


def create_purchase_order_template() -> WorkflowDefinition:
    """Amount-based purchase order approval.

    Topology::
        Start → Amount Check
          true  (> $10,000) → Executive Approvals ⇉ CFO / CEO → Merge → End
          false (≤ $10,000) → Manager Approval → End
    """
    b = _Builder()

    b.add(NodeType.START, "start", "Purchase Request Submitted", 40, 240)
    b.add(
        NodeType.CONDITION, "amount-check", "Amount Check", 260, 230,
        conditions=[Condition(
            id="amount-over-limit", field="amount",
            operator=ConditionOperator.GREATER_THAN, value=10000,
        )],
    )
    b.add(
        NodeType.APPROVAL, "manager-approval", "Manager Approval", 520, 420,
        assignees=_role("department-manager", "Department Manager"),
        sla=SLA(duration=24, unit=TimeUnit.HOURS),
        priority=Priority.HIGH,
    )
    b.add(NodeType.PARALLEL, "executive-approvals", "Executive Approvals", 520, 100)
    b.add(
        NodeType.APPROVAL, "cfo-approval", "CFO Approval", 760, 20,
        assignees=_role("cfo", "Chief Financial Officer"),
        sla=SLA(duration=2, unit=TimeUnit.DAYS),
        priority=Priority.HIGH,
    )
    b.add(
        NodeType.APPROVAL, "ceo-approval", "CEO Approval", 760, 180,
        assignees=_role("ceo", "Chief Executive Officer"),
        sla=SLA(duration=2, unit=TimeUnit.DAYS),
        priority=Priority.HIGH,
    )
    b.add(
        NodeType.MERGE, "merge-approvals", "Merge Approvals", 1020, 100,
        merge_config=MergeConfig(wait_for_all=True, minimum_required=2),
    )
    b.add(NodeType.END, "end-executive", "Purchase Approved", 1240, 110)
    b.add(NodeType.END, "end-manager", "Purchase Approved (Manager)", 780, 430)
    b.add(NodeType.END, "end-manager-rejected", "Purchase Rejected", 780, 560)
    b.add(NodeType.END, "end-cfo-rejected", "Rejected by CFO", 1020, -60)
    b.add(NodeType.END, "end-ceo-rejected", "Rejected by CEO", 1020, 260)

    b.edge("start", "amount-check", lbl="Submit")
    b.edge("amount-check", "executive-approvals", handle="right-true", lbl="> $10,000")
    b.edge("amount-check", "manager-approval", handle="bottom-false", lbl="≤ $10,000")
    b.edge("executive-approvals", "cfo-approval", lbl="CFO Review")
    b.edge("executive-approvals", "ceo-approval", lbl="CEO Review")
    b.edge("cfo-approval", "merge-approvals", handle="right-approved", lbl="Approved")
    b.edge("ceo-approval", "merge-approvals", handle="right-approved", lbl="Approved")
    b.edge("cfo-approval", "end-cfo-rejected", handle="bottom-rejected")
    b.edge("ceo-approval", "end-ceo-rejected", handle="bottom-rejected")
    b.edge("merge-approvals", "end-executive", lbl="All Approved")
    b.edge("manager-approval", "end-manager", handle="right-approved", lbl="Approved")
    b.edge("manager-approval", "end-manager-rejected", handle="bottom-rejected")

    return WorkflowDefinition(
        id="template-purchase-order",
        name="Purchase Order Approval",
        description="Multi-level purchase order approval based on amount",
        category="Finance",
        priority=Priority.HIGH,
        tags=["template", "finance"],
        nodes=b.nodes,
        edges=b.edges,
        created_by="system",
    )


# ============================================================================
# Document Review
# ============================================================================


def create_document_review_template() -> WorkflowDefinition:
    """Peer review followed by a final approval and archival.

    Topology::
        Start → Peer Review → Review Decision
          true  (needs revision) → Author Revision → Returned to Author
          false (approved)       → Final Approval
              approved → Publish & Archive
              rejected → Document Rejected
    """
    b = _Builder()

    b.add(NodeType.START, "start", "Document Submitted", 40, 200)
    b.add(
        NodeType.TASK, "peer-review", "Peer Review", 260, 190,
        task_type="review",
        assignees=[Assignee(type=AssigneeType.GROUP, id="peer-reviewers", name="Peer Reviewers")],
        sla=SLA(duration=3, unit=TimeUnit.DAYS),
    )
    b.add(
        NodeType.CONDITION, "review-decision", "Review Decision", 520, 180,
        conditions=[Condition(
            id="needs-revision", field="needsRevision",
            operator=ConditionOperator.IS_TRUE,
        )],
    )
    b.add(
        NodeType.TASK, "author-revision", "Author Revision", 780, 60,
        assignees=_role("author", "Document Author"),
        sla=SLA(duration=2, unit=TimeUnit.DAYS),
    )
    b.add(NodeType.END, "end-returned", "Returned to Author", 1040, 70)
    b.add(
        NodeType.APPROVAL, "final-approval", "Final Approval", 780, 320,
        assignees=_role("content-manager", "Content Manager"),
        sla=SLA(duration=1, unit=TimeUnit.DAYS),
    )
    b.add(NodeType.ARCHIVE, "archive", "Publish & Archive", 1040, 330)
    b.add(NodeType.END, "end-rejected", "Document Rejected", 1040, 470)

    b.edge("start", "peer-review", lbl="Submit")
    b.edge("peer-review", "review-decision", lbl="Review Complete")
    b.edge("review-decision", "author-revision", handle="right-true", lbl="Needs Revision")
    b.edge("review-decision", "final-approval", handle="bottom-false", lbl="Approved")
    b.edge("author-revision", "end-returned", lbl="Resubmit")
    b.edge("final-approval", "archive", handle="right-approved", lbl="Final Approval")
    b.edge("final-approval", "end-rejected", handle="bottom-rejected")

    return WorkflowDefinition(
        id="template-document-review",
        name="Document Review Process",
        description="Peer review followed by management approval and archival",
        category="Content",
        priority=Priority.MEDIUM,
        tags=["template", "content"],
        nodes=b.nodes,
        edges=b.edges,
        created_by="system",
    )


# ============================================================================
# Registry
# ============================================================================

_BUILTIN_TEMPLATES: Dict[str, Callable[[], WorkflowDefinition]] = {
    "leave-request": create_leave_request_template,
    "purchase-order": create_purchase_order_template,
    "document-review": create_document_review_template,
}


def get_builtin_templates() -> List[WorkflowDefinition]:
    """Fresh copies of every built-in template."""
    return [factory() for factory in _BUILTIN_TEMPLATES.values()]


def get_template(name: str) -> Optional[WorkflowDefinition]:
    factory = _BUILTIN_TEMPLATES.get(name)
    return factory() if factory else None
