"""
Node Definitions — BaseNode ABC, handles, capabilities and the registry.

Every workflow node type is described by exactly one ``BaseNode``
subclass registered with ``@register_node``. The registry is the single
capability table the validators consult: adding a node type means
adding one class.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Any, Dict, List, Optional, Type, Union

from workflow_designer.workflow.workflow_model import NodeType, WorkflowNodeData

logger = getLogger(__name__)

UNLIMITED = -1

ESCALATION_HANDLE = "bottom-escalation"


@dataclass(frozen=True)
class NodeCapabilities:
    """Arity limits of a node. ``-1`` means unlimited."""
    max_incoming: int
    max_outgoing: int

    def incoming_exhausted(self, count: int) -> bool:
        return self.max_incoming != UNLIMITED and count >= self.max_incoming

    def outgoing_exhausted(self, count: int) -> bool:
        return self.max_outgoing != UNLIMITED and count >= self.max_outgoing

    def to_dict(self) -> Dict[str, int]:
        return {"maxIncoming": self.max_incoming, "maxOutgoing": self.max_outgoing}


DEFAULT_CAPABILITIES = NodeCapabilities(max_incoming=1, max_outgoing=1)


@dataclass(frozen=True)
class Handle:
    """A named connection point on a node.

    ``max_connections`` of 1 means the handle carries at most one
    edge regardless of the node's overall arity budget.
    """
    id: str
    label: str
    description: str = ""
    max_connections: int = UNLIMITED
    requires_escalation: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "maxConnections": self.max_connections,
            "requiresEscalation": self.requires_escalation,
        }


class BaseNode:
    """Static description of one node type.

    Subclasses set the class attributes; the escalation-aware
    hooks below cover types whose arity depends on node data.
    """

    node_type: NodeType
    label: str = ""
    description: str = ""
    category: str = "general"
    icon: str = ""
    color: str = "#64748b"

    max_incoming: int = 1
    max_outgoing: int = 1
    # Extra outgoing slot granted when SLA escalation is enabled.
    escalation_extra_outgoing: int = 0
    # Outgoing arity governed by per-handle budgets instead of the total.
    handle_governed_outgoing: bool = False

    input_handles: List[Handle] = [Handle(id="left", label="In")]
    output_handles: List[Handle] = [Handle(id="right", label="Out")]
    strict_input_handles: bool = False
    strict_output_handles: bool = False

    def get_capabilities(self, data: Optional[WorkflowNodeData] = None) -> NodeCapabilities:
        max_out = self.max_outgoing
        if data is not None and data.escalation_enabled and max_out != UNLIMITED:
            max_out += self.escalation_extra_outgoing
        return NodeCapabilities(max_incoming=self.max_incoming, max_outgoing=max_out)

    def get_output_handles(self, data: Optional[WorkflowNodeData] = None) -> List[Handle]:
        """Output handles currently usable, hiding escalation handles when disabled."""
        enabled = data is not None and data.escalation_enabled
        return [h for h in self.output_handles if enabled or not h.requires_escalation]

    def find_output_handle(self, handle_id: Optional[str]) -> Optional[Handle]:
        for h in self.output_handles:
            if h.id == handle_id:
                return h
        return None

    def accepts_source_handle(self, handle_id: Optional[str]) -> bool:
        if not self.strict_output_handles:
            return True
        return self.find_output_handle(handle_id) is not None

    def accepts_target_handle(self, handle_id: Optional[str]) -> bool:
        if not self.strict_input_handles:
            return True
        return any(h.id == handle_id for h in self.input_handles)

    def to_dict(self, data: Optional[WorkflowNodeData] = None) -> Dict[str, Any]:
        """Serialize for the node palette."""
        return {
            "nodeType": self.node_type.value,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "color": self.color,
            "capabilities": self.get_capabilities(data).to_dict(),
            "inputHandles": [h.to_dict() for h in self.input_handles],
            "outputHandles": [h.to_dict() for h in self.get_output_handles(data)],
        }


# ============================================================================
# Registry
# ============================================================================


class NodeRegistry:
    """Lookup table of node definitions keyed by ``NodeType``."""

    def __init__(self) -> None:
        self._nodes: Dict[NodeType, BaseNode] = {}

    def register(self, node_cls: Type[BaseNode]) -> None:
        instance = node_cls()
        if instance.node_type in self._nodes:
            logger.warning(f"Node type '{instance.node_type.value}' re-registered by {node_cls.__name__}")
        self._nodes[instance.node_type] = instance

    def get(self, node_type: Union[NodeType, str, None]) -> Optional[BaseNode]:
        try:
            key = NodeType(node_type)
        except ValueError:
            return None
        return self._nodes.get(key)

    def list_all(self) -> List[BaseNode]:
        return list(self._nodes.values())

    def __contains__(self, node_type: object) -> bool:
        return self.get(node_type) is not None  # type: ignore[arg-type]


_registry = NodeRegistry()


def get_node_registry() -> NodeRegistry:
    return _registry


def register_node(cls: Type[BaseNode]) -> Type[BaseNode]:
    """Class decorator — add a node definition to the global registry."""
    _registry.register(cls)
    return cls


def capabilities_for(
    node_type: Union[NodeType, str, None],
    data: Optional[WorkflowNodeData] = None,
) -> NodeCapabilities:
    """Arity limits for a node type.

    Unrecognized types get the permissive 1/1 default instead of
    failing; the type set itself is enforced by the data model.
    """
    definition = _registry.get(node_type)
    if definition is None:
        return DEFAULT_CAPABILITIES
    return definition.get_capabilities(data)
