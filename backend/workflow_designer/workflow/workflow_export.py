"""
Workflow Export — the canvas' JSON export document.

Shape::

    {
      "workflow": {"id": ..., "name": ..., "settings": {...}, ...},
      "nodes": [...],
      "edges": [...],
      "metadata": {"exportedAt": ..., "nodeCount": 6, "edgeCount": 5,
                   "exportVersion": "1.0.0"}
    }

Importing always yields a fresh draft: new id, publish and update
timestamps cleared. The core never touches the filesystem; callers
read and write the text.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import List, Optional

from pydantic import Field, ValidationError

from workflow_designer.workflow.workflow_model import (
    CamelModel,
    Priority,
    WorkflowDefinition,
    WorkflowEdge,
    WorkflowNode,
    WorkflowSettings,
    WorkflowStatus,
)

logger = getLogger(__name__)

EXPORT_VERSION = "1.0.0"


class WorkflowImportError(ValueError):
    """Raised when an export document cannot be read back."""


class ExportMetadata(CamelModel):
    exported_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    node_count: int = 0
    edge_count: int = 0
    export_version: str = EXPORT_VERSION


class WorkflowHeader(CamelModel):
    """Workflow metadata without the graph."""

    id: str
    name: str = "Untitled Workflow"
    description: str = ""
    version: str = "1.0.0"
    status: WorkflowStatus = WorkflowStatus.DRAFT
    category: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    tags: List[str] = Field(default_factory=list)
    settings: WorkflowSettings = Field(default_factory=WorkflowSettings)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: str = ""


class WorkflowExport(CamelModel):
    workflow: WorkflowHeader
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    metadata: ExportMetadata = Field(default_factory=ExportMetadata)


def build_export(definition: WorkflowDefinition) -> WorkflowExport:
    header = WorkflowHeader.model_validate(
        definition.model_dump(exclude={"nodes", "edges", "published_at"})
    )
    header.updated_at = datetime.now(timezone.utc).isoformat()
    return WorkflowExport(
        workflow=header,
        nodes=list(definition.nodes),
        edges=list(definition.edges),
        metadata=ExportMetadata(
            node_count=len(definition.nodes),
            edge_count=len(definition.edges),
        ),
    )


def export_workflow(definition: WorkflowDefinition) -> str:
    """Serialise ``definition`` as an indented camelCase export document."""
    document = build_export(definition)
    logger.info(
        f"Exported workflow {definition.name} ({definition.id}): "
        f"{document.metadata.node_count} nodes, {document.metadata.edge_count} edges"
    )
    return json.dumps(document.to_wire(), indent=2, ensure_ascii=False)


def import_workflow(text: str) -> WorkflowDefinition:
    """Read an export document back as a new draft definition.

    Raises:
        WorkflowImportError: If ``text`` is not JSON or not an export document.
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as e:
        raise WorkflowImportError(f"Invalid workflow data format: {e}") from e
    if isinstance(raw, dict) and "workflow" not in raw and "exportMetadata" in raw:
        # {metadata: <workflow>, nodes, edges, exportMetadata: <export info>}
        raw = dict(raw)
        raw["workflow"] = raw.pop("metadata", None)
        raw["metadata"] = raw.pop("exportMetadata")
    if not isinstance(raw, dict) or not isinstance(raw.get("workflow"), dict):
        raise WorkflowImportError("Invalid workflow data format: missing 'workflow' object")

    # Older documents keep the graph inside the workflow object
    workflow = raw["workflow"]
    payload = dict(raw)
    for key in ("nodes", "edges"):
        if key not in payload and key in workflow:
            payload[key] = workflow[key]
    payload["workflow"] = {k: v for k, v in workflow.items() if k not in ("nodes", "edges")}
    payload["workflow"].setdefault("id", "")

    try:
        document = WorkflowExport.model_validate(payload)
    except ValidationError as e:
        raise WorkflowImportError(f"Invalid workflow data format: {e}") from e

    header = document.workflow.model_dump(exclude={"id", "status", "updated_at", "created_at"})
    definition = WorkflowDefinition(
        **header,
        id=str(uuid.uuid4()),
        status=WorkflowStatus.DRAFT,
        nodes=document.nodes,
        edges=document.edges,
    )
    logger.info(
        f"Imported workflow {definition.name} as {definition.id} "
        f"({len(definition.nodes)} nodes, {len(definition.edges)} edges)"
    )
    return definition
