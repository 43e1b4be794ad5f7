# backend/tests/test_templates.py

import pytest

from workflow_designer.workflow.templates import get_builtin_templates, get_template
from workflow_designer.workflow.validation import validate_workflow
from workflow_designer.workflow.workflow_model import NodeType, WorkflowStatus


@pytest.mark.parametrize("template", get_builtin_templates(), ids=lambda t: t.id)
class TestBuiltinTemplates:

    def test_structurally_valid(self, template):
        result = validate_workflow(template.nodes, template.edges)
        assert result.is_valid, [e.message for e in result.errors]

    def test_single_start_and_a_terminal(self, template):
        assert template.get_start_node() is not None
        assert template.get_end_nodes()

    def test_edges_reference_known_nodes(self, template):
        known = {n.id for n in template.nodes}
        for edge in template.edges:
            assert edge.source in known and edge.target in known

    def test_publishable(self, template):
        template.publish()
        assert template.status == WorkflowStatus.ACTIVE


def test_templates_are_fresh_copies():
    first = get_template("leave-request")
    second = get_template("leave-request")
    first.nodes.clear()
    assert second.nodes


def test_unknown_template():
    assert get_template("expense-claim") is None


def test_purchase_order_uses_branching_nodes():
    kinds = {n.node_type for n in get_template("purchase-order").nodes}
    assert {NodeType.CONDITION, NodeType.PARALLEL, NodeType.MERGE} <= kinds
