# backend/tests/test_export.py

import json

import pytest

from workflow_designer.workflow.templates import create_purchase_order_template
from workflow_designer.workflow.workflow_export import (
    EXPORT_VERSION,
    WorkflowImportError,
    export_workflow,
    import_workflow,
)
from workflow_designer.workflow.workflow_model import NodeType, WorkflowStatus


@pytest.fixture
def published():
    definition = create_purchase_order_template()
    definition.publish()
    return definition


class TestExport:

    def test_document_shape(self, published):
        document = json.loads(export_workflow(published))
        assert set(document) == {"workflow", "nodes", "edges", "metadata"}
        assert document["metadata"]["nodeCount"] == len(published.nodes)
        assert document["metadata"]["edgeCount"] == len(published.edges)
        assert document["metadata"]["exportVersion"] == EXPORT_VERSION
        assert "exportedAt" in document["metadata"]

    def test_camel_case_wire_keys(self, published):
        document = json.loads(export_workflow(published))
        assert document["workflow"]["createdBy"] == "system"
        assert "publishedAt" not in document["workflow"]
        first_edge = document["edges"][0]
        assert first_edge["sourceHandle"] == "right"
        assert document["nodes"][1]["nodeType"] == "condition"


class TestImport:

    def test_import_creates_fresh_draft(self, published):
        imported = import_workflow(export_workflow(published))
        assert imported.id != published.id
        assert imported.status == WorkflowStatus.DRAFT
        assert imported.published_at is None
        assert imported.updated_at is None
        assert imported.name == published.name
        assert [n.id for n in imported.nodes] == [n.id for n in published.nodes]
        assert imported.validate_graph().is_valid

    def test_canvas_document_accepted(self):
        text = json.dumps({
            "workflow": {"id": "wf-1", "name": "Canvas", "status": "active"},
            "nodes": [
                {"id": "s", "type": "workflowNode", "position": {"x": 0, "y": 0},
                 "data": {"label": "Start", "nodeType": "start", "allowDelegation": False}},
                {"id": "e", "type": "workflowNode", "position": {"x": 200, "y": 0},
                 "data": {"label": "End", "nodeType": "end"}},
            ],
            "edges": [{"id": "s-e", "source": "s", "target": "e", "sourceHandle": "right"}],
            "metadata": {"exportedAt": "2025-08-21T08:12:11.570Z", "nodeCount": 2,
                         "edgeCount": 1, "exportVersion": "1.0.0"},
        })
        imported = import_workflow(text)
        assert imported.status == WorkflowStatus.DRAFT
        assert imported.nodes[0].node_type == NodeType.START
        # unknown node data survives
        assert imported.nodes[0].data.model_dump(by_alias=True)["allowDelegation"] is False
        assert imported.validate_graph().is_valid

    def test_canvas_keys_survive_round_trip(self):
        text = json.dumps({
            "workflow": {"name": "Canvas"},
            "nodes": [
                {"id": "s", "type": "workflowNode", "selected": True,
                 "data": {"label": "Start", "nodeType": "start"}},
                {"id": "e", "type": "workflowNode", "data": {"label": "End", "nodeType": "end"}},
            ],
            "edges": [{"id": "s-e", "source": "s", "target": "e", "type": "smoothstep", "animated": True}],
        })
        document = json.loads(export_workflow(import_workflow(text)))
        assert document["nodes"][0]["type"] == "workflowNode"
        assert document["nodes"][0]["selected"] is True
        assert document["edges"][0]["type"] == "smoothstep"
        assert document["edges"][0]["animated"] is True

    def test_graph_nested_in_workflow_object(self):
        text = json.dumps({"workflow": {
            "name": "Nested",
            "nodes": [{"id": "s", "data": {"label": "Start", "nodeType": "start"}}],
            "edges": [],
        }})
        imported = import_workflow(text)
        assert imported.name == "Nested"
        assert [n.id for n in imported.nodes] == ["s"]

    def test_export_metadata_variant_accepted(self):
        text = json.dumps({
            "metadata": {"id": "wf-2", "name": "Variant"},
            "nodes": [{"id": "s", "data": {"label": "Start", "nodeType": "start"}}],
            "edges": [],
            "exportMetadata": {"nodeCount": 1, "edgeCount": 0},
        })
        imported = import_workflow(text)
        assert imported.name == "Variant"
        assert imported.id != "wf-2"

    @pytest.mark.parametrize("text", [
        "not json",
        "[]",
        json.dumps({"nodes": []}),
        json.dumps({"workflow": {"name": "x"}, "nodes": [{"id": "n", "data": {}}]}),
    ])
    def test_malformed_documents(self, text):
        with pytest.raises(WorkflowImportError):
            import_workflow(text)
