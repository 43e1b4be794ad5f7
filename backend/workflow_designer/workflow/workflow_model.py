"""
Workflow Data Models — definitions, nodes, and edges.

These are the serializable data structures that describe a
user-designed business-process graph. The host application owns
them; validators and the layout engine read snapshots of
``nodes`` / ``edges`` and return new values, never mutating input.

Python attributes are snake_case. The JSON shape exchanged with the
canvas is camelCase (``nodeType``, ``sourceHandle``,
``escalationEnabled`` …); both spellings are accepted on input.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from workflow_designer.workflow.validation.issues import ValidationResult


class NodeType(str, Enum):
    """Closed set of workflow node roles."""
    START = "start"
    TASK = "task"
    APPROVAL = "approval"
    CONDITION = "condition"
    PARALLEL = "parallel"
    MERGE = "merge"
    ESCALATION = "escalation"
    END = "end"
    ARCHIVE = "archive"


TERMINAL_TYPES = frozenset({NodeType.END, NodeType.ARCHIVE})


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AssigneeType(str, Enum):
    USER = "user"
    GROUP = "group"
    ROLE = "role"


class TimeUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"


class CamelModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump in the canvas' camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Node configuration surface
# ============================================================================


class Position(CamelModel):
    x: float = 0.0
    y: float = 0.0


class Size(CamelModel):
    width: float
    height: float


class Assignee(CamelModel):
    type: AssigneeType
    id: str
    name: str
    email: Optional[str] = None


class SLA(CamelModel):
    """Service-level agreement attached to a task or approval."""

    duration: float = Field(ge=1)
    unit: TimeUnit = TimeUnit.HOURS
    warning_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    escalation_enabled: bool = False
    escalation_path: Optional[List[Assignee]] = None


class Condition(CamelModel):
    id: str
    field: str = Field(min_length=1)
    operator: ConditionOperator
    value: Optional[Union[bool, int, float, str]] = None
    logical_operator: Optional[str] = None


class MergeConfig(CamelModel):
    """How a merge node waits for its parallel branches."""

    wait_for_all: bool = True
    wait_for_optional: bool = False
    minimum_required: Optional[int] = None
    timeout: Optional[float] = None  # minutes
    skip_on_timeout: bool = True
    escalate_on_timeout: bool = False


class ApprovalConfig(CamelModel):
    require_rejection_path: bool = False
    auto_approve_on_timeout: bool = False
    allow_delegate_approval: bool = True
    require_rejection_reason: bool = True
    allow_conditional_approval: bool = False


class WorkflowNodeData(CamelModel):
    """Validation-relevant configuration carried by a node.

    Unknown keys (notifications, form field ids, metadata …) are kept
    as-is so a round-trip through the core never loses host data.
    """

    model_config = ConfigDict(extra="allow")

    label: str = ""
    description: Optional[str] = None
    task_type: Optional[str] = None
    assignees: List[Assignee] = Field(default_factory=list)
    sla: Optional[SLA] = None
    conditions: List[Condition] = Field(default_factory=list)
    merge_config: Optional[MergeConfig] = None
    approval_config: Optional[ApprovalConfig] = None
    priority: Priority = Priority.MEDIUM
    optional: bool = False
    locked: bool = False

    @property
    def escalation_enabled(self) -> bool:
        return bool(self.sla and self.sla.escalation_enabled)


# ============================================================================
# Graph elements
# ============================================================================


class WorkflowNode(CamelModel):
    """A single node placed on the workflow canvas.

    ``size`` is the measured on-screen size when the host knows it
    (accepted as ``size`` or ``measured``); the layout engine falls
    back to type-specific defaults otherwise. Canvas-only keys such as
    ``type`` or ``selected`` are kept for the round-trip.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    node_type: NodeType
    position: Position = Field(default_factory=Position)
    size: Optional[Size] = Field(
        default=None,
        validation_alias=AliasChoices("size", "measured"),
    )
    data: WorkflowNodeData = Field(default_factory=WorkflowNodeData)

    @model_validator(mode="before")
    @classmethod
    def _hoist_node_type(cls, values: Any) -> Any:
        # Canvas documents keep the role in ``data.nodeType``.
        if isinstance(values, dict) and not (
            "node_type" in values or "nodeType" in values
        ):
            data = values.get("data")
            if isinstance(data, dict):
                inner = data.get("nodeType", data.get("node_type"))
                if inner is not None:
                    values = dict(values)
                    values["node_type"] = inner
        return values

    @property
    def label(self) -> str:
        return self.data.label or self.id


class EdgeData(CamelModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""


class WorkflowEdge(CamelModel):
    """A directed edge between two nodes.

    Handles name the logical connection points on either end
    (``right-true``, ``bottom-rejected``, ``left`` …).
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    data: EdgeData = Field(default_factory=EdgeData)


class WorkflowSettings(CamelModel):
    allow_parallel_execution: bool = False
    auto_archive: bool = True
    archive_after_days: int = 30
    max_execution_time: Optional[float] = None  # hours
    enable_audit_log: bool = True
    enable_notifications: bool = True
    default_sla: Optional[SLA] = None


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class WorkflowDefinition(CamelModel):
    """A complete workflow graph definition.

    Contains all nodes, edges, and metadata.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Untitled Workflow"
    description: str = ""
    version: str = "1.0.0"
    status: WorkflowStatus = WorkflowStatus.DRAFT
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    settings: WorkflowSettings = Field(default_factory=WorkflowSettings)
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    created_by: str = ""
    created_at: str = Field(default_factory=_utcnow)
    updated_at: Optional[str] = None
    published_at: Optional[str] = None

    def touch(self) -> None:
        """Update the ``updated_at`` timestamp."""
        self.updated_at = _utcnow()

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edges_from(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges originating from a node."""
        return [e for e in self.edges if e.source == node_id]

    def get_edges_to(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target == node_id]

    def get_start_node(self) -> Optional[WorkflowNode]:
        """Find the node of type 'start'."""
        for n in self.nodes:
            if n.node_type == NodeType.START:
                return n
        return None

    def get_end_nodes(self) -> List[WorkflowNode]:
        """Find all terminal (end / archive) nodes."""
        return [n for n in self.nodes if n.node_type in TERMINAL_TYPES]

    def validate_graph(self) -> "ValidationResult":
        """Run the structural validator over this definition."""
        from workflow_designer.workflow.validation.structure_validator import validate_workflow

        return validate_workflow(self.nodes, self.edges)

    def publish(self) -> "ValidationResult":
        """Mark the workflow active.

        Raises:
            WorkflowValidationError: If the graph has structural errors.
        """
        from workflow_designer.workflow.validation.issues import WorkflowValidationError

        result = self.validate_graph()
        if not result.is_valid:
            raise WorkflowValidationError(result)
        now = _utcnow()
        self.status = WorkflowStatus.ACTIVE
        self.published_at = now
        self.updated_at = now
        return result
