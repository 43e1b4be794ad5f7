"""
Structural Validator — evaluate a whole workflow snapshot.

Re-run after every edit, so every rule is a single pass over the node
and edge lists (cycle detection aside). Rules never raise; each finding
becomes a ``ValidationIssue`` and ``is_valid`` is simply "no errors".
"""

from __future__ import annotations

from collections import Counter, defaultdict
from logging import getLogger
from typing import Dict, List, Sequence, Set

from workflow_designer.workflow.validation.cycles import build_graph, find_cycles
from workflow_designer.workflow.validation.issues import (
    IssueCategory,
    ValidationIssue,
    ValidationResult,
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

_NO_OUTGOING_REQUIRED = TERMINAL_TYPES | {NodeType.APPROVAL}
_STAFFED_TYPES = (NodeType.TASK, NodeType.APPROVAL)


class _GraphIndex:
    """Per-snapshot lookups built once per validation run."""

    def __init__(self, nodes: Sequence[WorkflowNode], edges: Sequence[WorkflowEdge]) -> None:
        self.node_ids: Set[str] = {n.id for n in nodes}
        self.outgoing: Dict[str, List[WorkflowEdge]] = defaultdict(list)
        self.incoming: Dict[str, List[WorkflowEdge]] = defaultdict(list)
        for e in edges:
            self.outgoing[e.source].append(e)
            self.incoming[e.target].append(e)

    def out_handles(self, node_id: str) -> Set[str]:
        return {e.source_handle for e in self.outgoing.get(node_id, []) if e.source_handle}


def validate_workflow(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> ValidationResult:
    """Validate the entire workflow structure."""
    index = _GraphIndex(nodes, edges)
    issues: List[ValidationIssue] = []

    issues.extend(_check_references(nodes, edges, index))
    issues.extend(_check_entry_and_exit(nodes))
    issues.extend(_check_connectivity(nodes, index))
    for node in nodes:
        issues.extend(_check_node(node, index))
    issues.extend(_check_cycles(nodes, edges))

    result = ValidationResult.from_issues(issues)
    logger.debug(
        f"Validated {len(nodes)} nodes / {len(edges)} edges: "
        f"{len(result.errors)} errors, {len(result.warnings)} warnings"
    )
    return result


# ====================================================================
# Graph-level rules
# ====================================================================


def _check_references(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    index: _GraphIndex,
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    for node_id, count in Counter(n.id for n in nodes).items():
        if count > 1:
            issues.append(error(
                f"duplicate-node-id-{node_id}",
                f"Node id \"{node_id}\" is used by {count} nodes",
                IssueCategory.DATA,
                node_id=node_id,
            ))

    for e in edges:
        if e.source not in index.node_ids:
            issues.append(error(
                f"edge-unknown-source-{e.id}",
                f"Edge references non-existent source node: {e.source}",
                IssueCategory.DATA,
                edge_id=e.id,
            ))
        if e.target not in index.node_ids:
            issues.append(error(
                f"edge-unknown-target-{e.id}",
                f"Edge references non-existent target node: {e.target}",
                IssueCategory.DATA,
                edge_id=e.id,
            ))
    return issues


def _check_entry_and_exit(nodes: Sequence[WorkflowNode]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    start_count = sum(1 for n in nodes if n.node_type == NodeType.START)
    if start_count == 0:
        issues.append(error(
            "no-start-node",
            "Workflow must have exactly one start node",
            IssueCategory.STRUCTURE,
        ))
    elif start_count > 1:
        issues.append(error(
            "multiple-start-nodes",
            "Workflow can only have one start node",
            IssueCategory.STRUCTURE,
        ))

    if not any(n.node_type in TERMINAL_TYPES for n in nodes):
        issues.append(error(
            "no-end-node",
            "Workflow must have at least one end or archive node",
            IssueCategory.STRUCTURE,
        ))
    return issues


def _check_connectivity(
    nodes: Sequence[WorkflowNode],
    index: _GraphIndex,
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for node in nodes:
        if node.node_type != NodeType.START and not index.incoming.get(node.id):
            issues.append(error(
                f"no-incoming-{node.id}",
                f"Node \"{node.label}\" has no incoming connections",
                IssueCategory.STRUCTURE,
                node_id=node.id,
            ))
        # approval obligations are handle-specific, see _check_approval
        if node.node_type not in _NO_OUTGOING_REQUIRED and not index.outgoing.get(node.id):
            issues.append(error(
                f"no-outgoing-{node.id}",
                f"Node \"{node.label}\" has no outgoing connections",
                IssueCategory.STRUCTURE,
                node_id=node.id,
            ))
    return issues


def _check_cycles(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> List[ValidationIssue]:
    labels = {n.id: n.label for n in nodes}
    issues: List[ValidationIssue] = []
    for cycle in find_cycles(build_graph(nodes, edges)):
        issues.append(error(
            f"cycle-{'-'.join(cycle)}",
            "Circular dependency detected: "
            + " → ".join(labels.get(nid, nid) for nid in cycle),
            IssueCategory.STRUCTURE,
            node_id=cycle[0],
        ))
    return issues


# ====================================================================
# Per-node rules
# ====================================================================


def _check_node(node: WorkflowNode, index: _GraphIndex) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    if not node.data.label.strip():
        issues.append(warning(
            f"no-label-{node.id}",
            f"{node.node_type.value} node {node.id} has no label",
            IssueCategory.DATA,
            node_id=node.id,
        ))

    if node.node_type == NodeType.CONDITION:
        issues.extend(_check_condition(node, index))
    elif node.node_type == NodeType.APPROVAL:
        issues.extend(_check_approval(node, index))
    elif node.node_type == NodeType.PARALLEL:
        issues.extend(_check_parallel(node, index))
    elif node.node_type == NodeType.MERGE:
        issues.extend(_check_merge(node, index))

    if node.node_type in _STAFFED_TYPES:
        issues.extend(_check_staffing(node))
    return issues


def _check_condition(node: WorkflowNode, index: _GraphIndex) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    handles = index.out_handles(node.id)

    if "right-true" not in handles:
        issues.append(error(
            f"condition-no-true-{node.id}",
            f"Condition node \"{node.label}\" must have a true path connection",
            IssueCategory.STRUCTURE,
            node_id=node.id,
        ))
    if "bottom-false" not in handles:
        issues.append(error(
            f"condition-no-false-{node.id}",
            f"Condition node \"{node.label}\" must have a false path connection",
            IssueCategory.STRUCTURE,
            node_id=node.id,
        ))
    if not node.data.conditions:
        issues.append(warning(
            f"condition-no-rules-{node.id}",
            f"Condition node \"{node.label}\" has no conditions defined",
            IssueCategory.DATA,
            node_id=node.id,
        ))
    return issues


def _check_approval(node: WorkflowNode, index: _GraphIndex) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    handles = index.out_handles(node.id)

    if "right-approved" not in handles:
        issues.append(error(
            f"approval-no-approved-{node.id}",
            f"Approval node \"{node.label}\" must have an approved path connection",
            IssueCategory.STRUCTURE,
            node_id=node.id,
        ))

    if "bottom-rejected" not in handles:
        config = node.data.approval_config
        require_rejection = config.require_rejection_path if config else False
        auto_approve = config.auto_approve_on_timeout if config else False
        if require_rejection:
            issues.append(error(
                f"approval-no-rejected-required-{node.id}",
                f"Approval node \"{node.label}\" is configured to require "
                f"a rejected path connection",
                IssueCategory.BUSINESS,
                node_id=node.id,
            ))
        elif not auto_approve:
            issues.append(warning(
                f"approval-no-rejected-{node.id}",
                f"Approval node \"{node.label}\" should have a rejected path "
                f"connection for better workflow handling",
                IssueCategory.BUSINESS,
                node_id=node.id,
            ))
    return issues


def _check_parallel(node: WorkflowNode, index: _GraphIndex) -> List[ValidationIssue]:
    if len(index.outgoing.get(node.id, [])) >= 2:
        return []
    return [warning(
        f"parallel-few-branches-{node.id}",
        f"Parallel node \"{node.label}\" should have at least 2 branches",
        IssueCategory.BUSINESS,
        node_id=node.id,
    )]


def _check_merge(node: WorkflowNode, index: _GraphIndex) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    branches = len(index.incoming.get(node.id, []))

    if branches == 1:
        issues.append(warning(
            f"merge-single-branch-{node.id}",
            f"Merge node \"{node.label}\" joins only one branch",
            IssueCategory.BUSINESS,
            node_id=node.id,
        ))

    config = node.data.merge_config
    if config is not None and config.minimum_required is not None and branches:
        if config.minimum_required > branches:
            issues.append(warning(
                f"merge-minimum-unreachable-{node.id}",
                f"Merge node \"{node.label}\" requires {config.minimum_required} "
                f"completed branches but only {branches} lead into it",
                IssueCategory.BUSINESS,
                node_id=node.id,
            ))
    return issues


def _check_staffing(node: WorkflowNode) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    kind = node.node_type.value
    if not node.data.assignees:
        issues.append(warning(
            f"no-assignees-{node.id}",
            f"{kind} node \"{node.label}\" should have assignees",
            IssueCategory.BUSINESS,
            node_id=node.id,
        ))
    if node.data.sla is None:
        issues.append(warning(
            f"no-sla-{node.id}",
            f"{kind} node \"{node.label}\" should have SLA configured",
            IssueCategory.BUSINESS,
            node_id=node.id,
        ))
    return issues
