# backend/tests/test_connection_validator.py

import random
from collections import Counter

import pytest

from workflow_designer.workflow.nodes import capabilities_for, get_node_registry
from workflow_designer.workflow.templates import get_builtin_templates
from workflow_designer.workflow.validation import (
    IssueCategory,
    can_connect,
    detect_cycles,
    is_connection_allowed,
    validate_connection_attempt,
)
from workflow_designer.workflow.workflow_model import SLA, NodeType


def error_ids(issues):
    return [i.id for i in issues if i.is_error]


class TestPairwiseRules:

    def test_self_connection_rejected(self, make_node):
        nodes = [make_node("t1", NodeType.TASK)]
        issues = validate_connection_attempt(nodes, [], "t1", "t1", "right", "left")
        assert "self-connection-t1" in error_ids(issues)
        assert not is_connection_allowed(issues)

    @pytest.mark.parametrize("node_type", list(NodeType))
    def test_self_loop_never_allowed(self, make_node, node_type):
        nodes = [make_node("n", node_type)]
        assert not can_connect(nodes, [], "n", "n", "right", "left")

    def test_start_cannot_be_target(self, make_node):
        nodes = [make_node("t1", NodeType.TASK), make_node("start", NodeType.START)]
        issues = validate_connection_attempt(nodes, [], "t1", "start", "right", "left")
        assert "start-as-target-start" in error_ids(issues)

    @pytest.mark.parametrize("node_type", [NodeType.END, NodeType.ARCHIVE])
    def test_terminal_cannot_be_source(self, make_node, node_type):
        nodes = [make_node("done", node_type), make_node("t1", NodeType.TASK)]
        issues = validate_connection_attempt(nodes, [], "done", "t1", "right", "left")
        assert "end-as-source-done" in error_ids(issues)

    def test_condition_requires_declared_handle(self, make_node):
        nodes = [make_node("check", NodeType.CONDITION), make_node("t1", NodeType.TASK)]
        issues = validate_connection_attempt(nodes, [], "check", "t1", "right", "left")
        assert "invalid-condition-handle-check" in error_ids(issues)

    def test_approval_requires_declared_handle(self, make_node):
        nodes = [make_node("ok", NodeType.APPROVAL), make_node("t1", NodeType.TASK)]
        assert not can_connect(nodes, [], "ok", "t1", "right", "left")
        assert can_connect(nodes, [], "ok", "t1", "right-approved", "left")

    def test_merge_target_handle_checked_on_target(self, make_node):
        nodes = [make_node("t1", NodeType.TASK), make_node("join", NodeType.MERGE)]
        issues = validate_connection_attempt(nodes, [], "t1", "join", "right", "top")
        assert "invalid-merge-handle-join" in error_ids(issues)
        assert can_connect(nodes, [], "t1", "join", "right", "left")

    def test_unknown_node_reported_not_raised(self, make_node):
        nodes = [make_node("t1", NodeType.TASK)]
        issues = validate_connection_attempt(nodes, [], "t1", "ghost", "right", "left")
        assert [i.id for i in issues] == ["node-not-found"]
        assert issues[0].node_id == "ghost"


class TestEscalation:

    def test_escalation_handle_disabled_is_one_business_error(self, make_node):
        nodes = [
            make_node("ok", NodeType.APPROVAL, sla=SLA(duration=8, escalation_enabled=False)),
            make_node("esc", NodeType.ESCALATION),
        ]
        issues = validate_connection_attempt(nodes, [], "ok", "esc", "bottom-escalation", "left")
        errors = [i for i in issues if i.is_error]
        assert len(errors) == 1
        assert errors[0].category == IssueCategory.BUSINESS
        assert errors[0].id == "escalation-disabled-ok"

    def test_escalation_handle_enabled(self, make_node, make_edge):
        nodes = [
            make_node("t1", NodeType.TASK, sla=SLA(duration=8, escalation_enabled=True)),
            make_node("next", NodeType.TASK),
            make_node("esc", NodeType.ESCALATION),
            make_node("esc-2", NodeType.ESCALATION),
        ]
        edges = [make_edge("t1", "next")]
        assert can_connect(nodes, edges, "t1", "esc", "bottom-escalation", "left")

        edges.append(make_edge("t1", "esc", source_handle="bottom-escalation"))
        issues = validate_connection_attempt(
            nodes, edges, "t1", "esc-2", "bottom-escalation", "left",
        )
        assert "task-handle-duplicate-t1-bottom-escalation" in error_ids(issues)

    def test_escalation_target_without_sla_is_advisory(self, make_node):
        nodes = [make_node("t1", NodeType.TASK), make_node("esc", NodeType.ESCALATION)]
        issues = validate_connection_attempt(nodes, [], "t1", "esc", "right", "left")
        assert is_connection_allowed(issues)
        assert "escalation-without-sla-t1" in [i.id for i in issues]


class TestArity:

    def test_task_second_outgoing_blocked(self, make_node, make_edge):
        nodes = [
            make_node("t1", NodeType.TASK),
            make_node("a", NodeType.TASK),
            make_node("b", NodeType.TASK),
        ]
        edges = [make_edge("t1", "a")]
        ids = error_ids(validate_connection_attempt(nodes, edges, "t1", "b", "right", "left"))
        assert "source-outgoing-limit-t1" in ids
        assert "task-handle-duplicate-t1-right" in ids

    def test_end_second_incoming_blocked(self, make_node, make_edge):
        nodes = [
            make_node("a", NodeType.TASK),
            make_node("b", NodeType.TASK),
            make_node("end", NodeType.END),
        ]
        edges = [make_edge("a", "end")]
        ids = error_ids(validate_connection_attempt(nodes, edges, "b", "end", "right", "left"))
        assert ids == ["target-incoming-limit-end"]

    def test_condition_branch_used_once(self, make_node, make_edge):
        nodes = [
            make_node("check", NodeType.CONDITION),
            make_node("a", NodeType.TASK),
            make_node("b", NodeType.TASK),
        ]
        edges = [make_edge("check", "a", source_handle="right-true")]
        ids = error_ids(validate_connection_attempt(nodes, edges, "check", "b", "right-true", "left"))
        assert ids == ["condition-handle-duplicate-check-right-true"]
        assert can_connect(nodes, edges, "check", "b", "bottom-false", "left")

    def test_approval_budgeted_per_handle(self, make_node, make_edge):
        nodes = [
            make_node("ok", NodeType.APPROVAL),
            make_node("a", NodeType.TASK),
            make_node("b", NodeType.TASK),
            make_node("c", NodeType.TASK),
        ]
        edges = [
            make_edge("ok", "a", source_handle="right-approved"),
            make_edge("ok", "b", source_handle="bottom-rejected"),
        ]
        ids = error_ids(validate_connection_attempt(nodes, edges, "ok", "c", "right-approved", "left"))
        assert ids == ["approval-handle-duplicate-ok-right-approved"]

    def test_merge_accepts_many_branches(self, make_node, make_edge):
        nodes = [make_node(f"t{i}", NodeType.TASK) for i in range(4)] + [
            make_node("join", NodeType.MERGE),
        ]
        edges = [make_edge(f"t{i}", "join") for i in range(3)]
        assert can_connect(nodes, edges, "t3", "join", "right", "left")

    def test_duplicate_connection(self, make_node, make_edge):
        nodes = [make_node("fan", NodeType.PARALLEL), make_node("join", NodeType.MERGE)]
        edges = [make_edge("fan", "join")]
        ids = error_ids(validate_connection_attempt(nodes, edges, "fan", "join", "right", "left"))
        assert ids == ["duplicate-connection-fan-join"]

    @pytest.mark.parametrize("template", get_builtin_templates(), ids=lambda t: t.id)
    def test_incremental_edges_never_exceed_capabilities(self, template):
        committed = []
        for edge in template.edges:
            issues = validate_connection_attempt(
                template.nodes, committed, edge.source, edge.target,
                edge.source_handle, edge.target_handle,
            )
            assert is_connection_allowed(issues), error_ids(issues)
            committed.append(edge)

        incoming = Counter(e.target for e in committed)
        outgoing = Counter(e.source for e in committed)
        for node in template.nodes:
            caps = capabilities_for(node.node_type, node.data)
            if caps.max_incoming >= 0:
                assert incoming[node.id] <= caps.max_incoming
            if caps.max_outgoing >= 0:
                assert outgoing[node.id] <= caps.max_outgoing

    @pytest.mark.parametrize("seed", range(8))
    def test_random_attempts_never_exceed_capabilities(self, seed, make_node, make_edge):
        rng = random.Random(seed)
        registry = get_node_registry()
        kinds = list(NodeType) + [rng.choice(list(NodeType)) for _ in range(6)]
        nodes = []
        for i, kind in enumerate(kinds):
            sla = SLA(duration=4, escalation_enabled=True) if rng.random() < 0.5 else None
            nodes.append(make_node(f"n{i}", kind, sla=sla))

        committed, rejected = [], 0
        for _ in range(200):
            source, target = rng.choice(nodes), rng.choice(nodes)
            source_handles = [h.id for h in registry.get(source.node_type).output_handles]
            target_handles = [h.id for h in registry.get(target.node_type).input_handles]
            source_handle = rng.choice(source_handles + ["right", "nowhere"])
            target_handle = rng.choice(target_handles + ["left"])
            issues = validate_connection_attempt(
                nodes, committed, source.id, target.id, source_handle, target_handle,
            )
            if is_connection_allowed(issues):
                committed.append(make_edge(
                    source.id, target.id, source_handle, target_handle,
                    eid=f"e{len(committed)}",
                ))
            else:
                rejected += 1

        assert committed and rejected
        assert detect_cycles(nodes, committed) == []

        incoming = Counter(e.target for e in committed)
        outgoing = Counter(e.source for e in committed)
        per_handle = Counter((e.source, e.source_handle) for e in committed)
        for node in nodes:
            definition = registry.get(node.node_type)
            caps = capabilities_for(node.node_type, node.data)
            if caps.max_incoming >= 0:
                assert incoming[node.id] <= caps.max_incoming
            if caps.max_outgoing >= 0 and not definition.handle_governed_outgoing:
                assert outgoing[node.id] <= caps.max_outgoing
            for handle in definition.output_handles:
                if handle.max_connections >= 0:
                    assert per_handle[(node.id, handle.id)] <= handle.max_connections


class TestCycles:

    def test_closing_edge_reported(self, make_node, make_edge):
        nodes = [
            make_node("fan", NodeType.PARALLEL),
            make_node("a", NodeType.ESCALATION),
            make_node("b", NodeType.ESCALATION),
        ]
        edges = [make_edge("fan", "a"), make_edge("a", "b")]
        issues = validate_connection_attempt(nodes, edges, "b", "a", "right", "left")
        cycle = [i for i in issues if i.id == "would-create-cycle"]
        assert len(cycle) == 1
        assert cycle[0].category == IssueCategory.STRUCTURE
        assert cycle[0].message.endswith("B → A → B")

    def test_existing_cycle_elsewhere_blocks(self, make_node, make_edge):
        nodes = [
            make_node("x", NodeType.ESCALATION),
            make_node("y", NodeType.ESCALATION),
            make_node("fan", NodeType.PARALLEL),
            make_node("join", NodeType.MERGE),
        ]
        edges = [make_edge("x", "y"), make_edge("y", "x")]
        issues = validate_connection_attempt(nodes, edges, "fan", "join", "right", "left")
        assert error_ids(issues) == ["would-create-cycle"]
        assert issues[0].message.endswith("X → Y → X")
        assert not can_connect(nodes, edges, "fan", "join", "right", "left")

    def test_acyclic_graph_does_not_block(self, make_node, make_edge):
        nodes = [
            make_node("fan", NodeType.PARALLEL),
            make_node("a", NodeType.ESCALATION),
            make_node("join", NodeType.MERGE),
        ]
        edges = [make_edge("fan", "a"), make_edge("a", "join")]
        issues = validate_connection_attempt(nodes, edges, "fan", "join", "right", "left")
        assert issues == []

    def test_warning_only_attempt_is_allowed(self, make_node):
        nodes = [make_node("t1", NodeType.TASK), make_node("end", NodeType.END)]
        issues = validate_connection_attempt(nodes, [], "t1", "end", "right", "left")
        assert [i.id for i in issues] == ["task-to-end-t1"]
        assert can_connect(nodes, [], "t1", "end", "right", "left")
