"""
Workflow Designer Core — validation and layout for the visual editor.

Architecture:
    workflow_model    — Data models for workflow definitions, nodes, edges
    nodes/            — BaseNode + per-type capabilities and handles
    validation/       — Connection gate, structural validator, cycle detection
    layout/           — Layered / force / stress layout strategies
    workflow_export   — Canvas export document import / export
    templates         — Pre-built business-process templates
"""

from workflow_designer.workflow.workflow_model import (
    NodeType,
    Position,
    Size,
    WorkflowDefinition,
    WorkflowEdge,
    WorkflowNode,
    WorkflowNodeData,
    WorkflowStatus,
)
from workflow_designer.workflow.nodes import (
    BaseNode,
    NodeCapabilities,
    NodeRegistry,
    capabilities_for,
    get_node_registry,
)
from workflow_designer.workflow.validation import (
    ValidationIssue,
    ValidationResult,
    WorkflowValidationError,
    can_connect,
    validate_connection,
    validate_connection_attempt,
    validate_connection_counts,
    validate_workflow,
)
from workflow_designer.workflow.layout import (
    LayoutAlgorithm,
    LayoutOptions,
    LayoutResult,
    LayoutSession,
    auto_layout,
    layout_nodes,
    validate_layout,
)
from workflow_designer.workflow.workflow_export import (
    WorkflowImportError,
    export_workflow,
    import_workflow,
)
from workflow_designer.workflow.templates import get_builtin_templates

__all__ = [
    "NodeType",
    "Position",
    "Size",
    "WorkflowDefinition",
    "WorkflowEdge",
    "WorkflowNode",
    "WorkflowNodeData",
    "WorkflowStatus",
    "BaseNode",
    "NodeCapabilities",
    "NodeRegistry",
    "capabilities_for",
    "get_node_registry",
    "ValidationIssue",
    "ValidationResult",
    "WorkflowValidationError",
    "can_connect",
    "validate_connection",
    "validate_connection_attempt",
    "validate_connection_counts",
    "validate_workflow",
    "LayoutAlgorithm",
    "LayoutOptions",
    "LayoutResult",
    "LayoutSession",
    "auto_layout",
    "layout_nodes",
    "validate_layout",
    "WorkflowImportError",
    "export_workflow",
    "import_workflow",
    "get_builtin_templates",
]
