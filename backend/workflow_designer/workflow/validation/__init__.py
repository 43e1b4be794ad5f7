"""
Workflow Validation.

Two pure, total validators over a graph snapshot:

    connection_validator — gates one proposed edge before it is committed
    structure_validator  — evaluates the whole graph after every edit
    cycles               — networkx DFS cycle detection shared by both
"""

from workflow_designer.workflow.validation.issues import (
    IssueCategory,
    Severity,
    ValidationIssue,
    ValidationResult,
    WorkflowValidationError,
    is_connection_allowed,
)
from workflow_designer.workflow.validation.cycles import (
    build_graph,
    detect_cycles,
    find_cycles,
    would_create_cycle,
)
from workflow_designer.workflow.validation.connection_validator import (
    can_connect,
    validate_connection,
    validate_connection_attempt,
    validate_connection_counts,
)
from workflow_designer.workflow.validation.structure_validator import validate_workflow

__all__ = [
    "IssueCategory",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "WorkflowValidationError",
    "is_connection_allowed",
    "build_graph",
    "detect_cycles",
    "find_cycles",
    "would_create_cycle",
    "can_connect",
    "validate_connection",
    "validate_connection_attempt",
    "validate_connection_counts",
    "validate_workflow",
]
