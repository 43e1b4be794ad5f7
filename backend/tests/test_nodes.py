# backend/tests/test_nodes.py

import pytest

from workflow_designer.workflow.nodes import (
    DEFAULT_CAPABILITIES,
    ESCALATION_HANDLE,
    UNLIMITED,
    capabilities_for,
    get_node_registry,
)
from workflow_designer.workflow.workflow_model import SLA, NodeType, WorkflowNodeData

ESCALATING = WorkflowNodeData(sla=SLA(duration=4, escalation_enabled=True))


class TestRegistry:

    def test_every_node_type_has_a_definition(self):
        registry = get_node_registry()
        for node_type in NodeType:
            assert node_type in registry

    def test_lookup_by_string(self):
        assert get_node_registry().get("approval").node_type == NodeType.APPROVAL

    def test_unknown_type_lookup_returns_none(self):
        assert get_node_registry().get("webhook") is None

    def test_palette_dict_uses_camel_case(self):
        payload = get_node_registry().get(NodeType.CONDITION).to_dict()
        assert payload["nodeType"] == "condition"
        assert payload["capabilities"] == {"maxIncoming": 1, "maxOutgoing": 2}
        assert [h["id"] for h in payload["outputHandles"]] == ["right-true", "bottom-false"]


class TestCapabilities:

    @pytest.mark.parametrize("node_type, expected", [
        (NodeType.START,      (0, 1)),
        (NodeType.TASK,       (1, 1)),
        (NodeType.APPROVAL,   (1, 2)),
        (NodeType.CONDITION,  (1, 2)),
        (NodeType.PARALLEL,   (1, UNLIMITED)),
        (NodeType.MERGE,      (UNLIMITED, 1)),
        (NodeType.ESCALATION, (UNLIMITED, 1)),
        (NodeType.END,        (1, 0)),
        (NodeType.ARCHIVE,    (1, 0)),
    ])
    def test_capability_table(self, node_type, expected):
        caps = capabilities_for(node_type)
        assert (caps.max_incoming, caps.max_outgoing) == expected

    @pytest.mark.parametrize("node_type, expected_out", [
        (NodeType.TASK, 2),
        (NodeType.APPROVAL, 3),
        (NodeType.CONDITION, 2),
    ])
    def test_escalation_grants_extra_outgoing(self, node_type, expected_out):
        assert capabilities_for(node_type, ESCALATING).max_outgoing == expected_out

    def test_unknown_type_gets_permissive_default(self):
        assert capabilities_for("webhook") == DEFAULT_CAPABILITIES
        assert capabilities_for(None) == DEFAULT_CAPABILITIES

    def test_unlimited_never_exhausts(self):
        caps = capabilities_for(NodeType.MERGE)
        assert not caps.incoming_exhausted(10_000)
        assert caps.outgoing_exhausted(1)


class TestHandles:

    def test_escalation_handle_hidden_until_enabled(self):
        task = get_node_registry().get(NodeType.TASK)
        assert ESCALATION_HANDLE not in [h.id for h in task.get_output_handles(WorkflowNodeData())]
        assert ESCALATION_HANDLE in [h.id for h in task.get_output_handles(ESCALATING)]

    def test_condition_rejects_undeclared_handle(self):
        condition = get_node_registry().get(NodeType.CONDITION)
        assert condition.accepts_source_handle("right-true")
        assert not condition.accepts_source_handle("right")
        assert not condition.accepts_source_handle(None)

    def test_merge_input_is_strict(self):
        merge = get_node_registry().get(NodeType.MERGE)
        assert merge.accepts_target_handle("left")
        assert not merge.accepts_target_handle("top")

    def test_task_accepts_any_target_handle(self):
        task = get_node_registry().get(NodeType.TASK)
        assert task.accepts_target_handle("top")
