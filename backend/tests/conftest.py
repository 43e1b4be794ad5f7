# backend/tests/conftest.py
"""
Shared test fixtures.

Builders for nodes and edges plus a couple of small canonical graphs.
Edges default to the ``right`` → ``left`` handles the canvas uses for
plain flow.
"""
import pytest

from workflow_designer.config import LayoutConfig
from workflow_designer.workflow.workflow_model import (
    NodeType,
    WorkflowEdge,
    WorkflowNode,
    WorkflowNodeData,
)


def build_node(nid, ntype, label=None, **data):
    if label is None:
        label = nid.replace("-", " ").title()
    return WorkflowNode(
        id=nid,
        node_type=ntype,
        data=WorkflowNodeData(label=label, **data),
    )


def build_edge(src, tgt, source_handle="right", target_handle="left", eid=None):
    return WorkflowEdge(
        id=eid or f"{src}-{source_handle}-{tgt}",
        source=src,
        target=tgt,
        source_handle=source_handle,
        target_handle=target_handle,
    )


@pytest.fixture
def make_node():
    return build_node


@pytest.fixture
def make_edge():
    return build_edge


# ── Canonical graphs ─────────────────────────────────────────────

@pytest.fixture
def linear_graph():
    """start → task → end, task without assignees or SLA."""
    nodes = [
        build_node("start", NodeType.START),
        build_node("task", NodeType.TASK),
        build_node("end", NodeType.END),
    ]
    edges = [
        build_edge("start", "task"),
        build_edge("task", "end"),
    ]
    return nodes, edges


@pytest.fixture
def branching_graph():
    """start → condition ⇉ (task-a, task-b) → ends."""
    nodes = [
        build_node("start", NodeType.START),
        build_node("check", NodeType.CONDITION),
        build_node("task-a", NodeType.TASK),
        build_node("task-b", NodeType.TASK),
        build_node("end-a", NodeType.END),
        build_node("end-b", NodeType.END),
    ]
    edges = [
        build_edge("start", "check"),
        build_edge("check", "task-a", source_handle="right-true"),
        build_edge("check", "task-b", source_handle="bottom-false"),
        build_edge("task-a", "end-a"),
        build_edge("task-b", "end-b"),
    ]
    return nodes, edges


@pytest.fixture
def layout_config():
    """Defaults, unaffected by WORKFLOW_LAYOUT_* variables in the environment."""
    return LayoutConfig()
