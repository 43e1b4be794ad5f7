"""
Workflow Nodes Package.

Auto-registers every node type definition into the global NodeRegistry.
Import this package to ensure all node types are available.
"""

from workflow_designer.workflow.nodes.base import (
    DEFAULT_CAPABILITIES,
    ESCALATION_HANDLE,
    UNLIMITED,
    BaseNode,
    Handle,
    NodeCapabilities,
    NodeRegistry,
    capabilities_for,
    get_node_registry,
    register_node,
)

# Import all node modules to trigger registration
from workflow_designer.workflow.nodes import flow_nodes   # noqa: F401
from workflow_designer.workflow.nodes import task_nodes   # noqa: F401
from workflow_designer.workflow.nodes import logic_nodes  # noqa: F401


__all__ = [
    "DEFAULT_CAPABILITIES",
    "ESCALATION_HANDLE",
    "UNLIMITED",
    "BaseNode",
    "Handle",
    "NodeCapabilities",
    "NodeRegistry",
    "capabilities_for",
    "get_node_registry",
    "register_node",
]
