"""
Connection Validator — gate a single proposed edge.

``validate_connection_attempt`` is called by the canvas before an edge
is committed. All checks run and their issues are unioned; an attempt
is allowed when no error-severity issue comes back (advisory warnings
never block). The validator is pure and total: unknown node ids are
reported as an issue, never raised.
"""

from __future__ import annotations

from logging import getLogger
from typing import Dict, List, Optional, Sequence

from workflow_designer.workflow.nodes import (
    ESCALATION_HANDLE,
    BaseNode,
    capabilities_for,
    get_node_registry,
)
from workflow_designer.workflow.validation.cycles import would_create_cycle
from workflow_designer.workflow.validation.issues import (
    IssueCategory,
    ValidationIssue,
    error,
    warning,
)
from workflow_designer.workflow.workflow_model import (
    TERMINAL_TYPES,
    NodeType,
    WorkflowEdge,
    WorkflowNode,
)

logger = getLogger(__name__)

_HANDLE_NAMES = {
    "right-true": "true",
    "bottom-false": "false",
    "right-approved": "approved",
    "bottom-rejected": "rejected",
    ESCALATION_HANDLE: "escalation",
    "right": "normal flow",
}


def _type_name(node: WorkflowNode) -> str:
    return node.node_type.value


def _handle_name(handle: Optional[str]) -> str:
    return _HANDLE_NAMES.get(handle or "", handle or "default")


# ====================================================================
# Public API
# ====================================================================


def validate_connection_attempt(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    source_id: str,
    target_id: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
) -> List[ValidationIssue]:
    """Validate a connection the user is about to make.

    Returns every issue found; an empty list (or one holding only
    warnings) permits the edge.
    """
    node_map: Dict[str, WorkflowNode] = {n.id: n for n in nodes}
    source = node_map.get(source_id)
    target = node_map.get(target_id)

    if source is None or target is None:
        return [error(
            "node-not-found",
            "Source or target node not found",
            IssueCategory.CONNECTION,
            node_id=source_id if source is None else target_id,
        )]

    issues = validate_connection(source, target, source_handle, target_handle)
    issues.extend(validate_connection_counts(
        nodes, edges, source_id, target_id, source_handle, target_handle,
    ))

    loop = would_create_cycle(nodes, edges, source_id, target_id)
    if loop is not None:
        labels = " → ".join(node_map[nid].label for nid in loop)
        issues.append(error(
            "would-create-cycle",
            f"This connection would create a circular dependency: {labels}",
            IssueCategory.STRUCTURE,
            node_id=source_id,
        ))

    if issues:
        logger.debug(
            f"Connection {source_id} → {target_id} "
            f"({source_handle} → {target_handle}): {[i.id for i in issues]}"
        )
    return issues


# ====================================================================
# Pairwise rules
# ====================================================================


def validate_connection(
    source: WorkflowNode,
    target: WorkflowNode,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
) -> List[ValidationIssue]:
    """Rules that depend only on the two endpoints and their handles."""
    issues: List[ValidationIssue] = []
    registry = get_node_registry()

    if source.id == target.id:
        issues.append(error(
            f"self-connection-{source.id}",
            "Cannot connect a node to itself",
            IssueCategory.CONNECTION,
            node_id=source.id,
        ))

    if target.node_type == NodeType.START:
        issues.append(error(
            f"start-as-target-{target.id}",
            "Start node cannot be a target (no incoming connections)",
            IssueCategory.STRUCTURE,
            node_id=target.id,
        ))

    if source.node_type in TERMINAL_TYPES:
        issues.append(error(
            f"end-as-source-{source.id}",
            "End/Archive nodes cannot have outgoing connections",
            IssueCategory.STRUCTURE,
            node_id=source.id,
        ))

    # ── Handle legality ──
    source_def = registry.get(source.node_type)
    if source_def is not None and not source_def.accepts_source_handle(source_handle):
        allowed = ", ".join(h.id for h in source_def.output_handles)
        issues.append(error(
            f"invalid-{_type_name(source)}-handle-{source.id}",
            f"{source_def.label} node must use one of its output handles ({allowed})",
            IssueCategory.CONNECTION,
            node_id=source.id,
        ))

    target_def = registry.get(target.node_type)
    if target_def is not None and not target_def.accepts_target_handle(target_handle):
        allowed = ", ".join(h.id for h in target_def.input_handles)
        issues.append(error(
            f"invalid-{_type_name(target)}-handle-{target.id}",
            f"{target_def.label} node must use its input handle ({allowed})",
            IssueCategory.CONNECTION,
            node_id=target.id,
        ))

    # ── Escalation gating ──
    if source_handle == ESCALATION_HANDLE and not source.data.escalation_enabled:
        issues.append(error(
            f"escalation-disabled-{source.id}",
            f"Escalation is not enabled for this {_type_name(source)} node. "
            f"Enable SLA escalation in properties to use this connection.",
            IssueCategory.BUSINESS,
            node_id=source.id,
        ))

    # ── Advisories ──
    if source.node_type == NodeType.TASK and target.node_type == NodeType.END:
        issues.append(warning(
            f"task-to-end-{source.id}",
            "Consider adding an approval step before ending the workflow",
            IssueCategory.BUSINESS,
            node_id=source.id,
        ))

    if target.node_type == NodeType.ESCALATION and not source.data.escalation_enabled:
        issues.append(warning(
            f"escalation-without-sla-{source.id}",
            "Source node should have SLA escalation enabled",
            IssueCategory.BUSINESS,
            node_id=source.id,
        ))

    return issues


# ====================================================================
# Arity rules
# ====================================================================


def validate_connection_counts(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    source_id: str,
    target_id: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
) -> List[ValidationIssue]:
    """Degree and per-handle limits, recomputed from ``edges``."""
    issues: List[ValidationIssue] = []
    node_map = {n.id: n for n in nodes}
    source = node_map.get(source_id)
    target = node_map.get(target_id)
    if source is None or target is None:
        return issues

    source_outgoing = [e for e in edges if e.source == source_id]
    target_incoming = [e for e in edges if e.target == target_id]

    source_def = get_node_registry().get(source.node_type)
    source_caps = capabilities_for(source.node_type, source.data)
    target_caps = capabilities_for(target.node_type, target.data)

    governed_by_handles = source_def is not None and source_def.handle_governed_outgoing
    if not governed_by_handles and source_caps.outgoing_exhausted(len(source_outgoing)):
        issues.append(error(
            f"source-outgoing-limit-{source_id}",
            f"{_type_name(source)} node can only have "
            f"{source_caps.max_outgoing} outgoing connection(s)",
            IssueCategory.CONNECTION,
            node_id=source_id,
        ))

    if target_caps.incoming_exhausted(len(target_incoming)):
        issues.append(error(
            f"target-incoming-limit-{target_id}",
            f"{_type_name(target)} node can only have "
            f"{target_caps.max_incoming} incoming connection(s)",
            IssueCategory.CONNECTION,
            node_id=target_id,
        ))

    if source_def is not None:
        issues.extend(_check_handle_budget(source, source_def, source_outgoing, source_handle))

    for e in source_outgoing:
        if (
            e.target == target_id
            and e.source_handle == source_handle
            and e.target_handle == target_handle
        ):
            issues.append(error(
                f"duplicate-connection-{source_id}-{target_id}",
                "These nodes are already connected through the same handles",
                IssueCategory.CONNECTION,
                node_id=source_id,
                edge_id=e.id,
            ))
            break

    return issues


def _check_handle_budget(
    source: WorkflowNode,
    definition: BaseNode,
    source_outgoing: List[WorkflowEdge],
    source_handle: Optional[str],
) -> List[ValidationIssue]:
    """One connection per named handle, independent of the arity budget."""
    handle = definition.find_output_handle(source_handle)
    if handle is None or handle.max_connections < 0:
        return []
    # escalation gating already reported this attempt
    if handle.requires_escalation and not source.data.escalation_enabled:
        return []

    used = sum(1 for e in source_outgoing if e.source_handle == handle.id)
    if used < handle.max_connections:
        return []

    return [error(
        f"{_type_name(source)}-handle-duplicate-{source.id}-{handle.id}",
        f"{definition.label} node already has a connection on the "
        f"{_handle_name(handle.id)} path",
        IssueCategory.CONNECTION,
        node_id=source.id,
    )]


def can_connect(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    source_id: str,
    target_id: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
) -> bool:
    """Shortcut for hosts that only need the verdict."""
    issues = validate_connection_attempt(
        nodes, edges, source_id, target_id, source_handle, target_handle,
    )
    return not any(i.is_error for i in issues)
