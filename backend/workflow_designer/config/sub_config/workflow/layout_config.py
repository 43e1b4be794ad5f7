"""
Layout Engine Configuration.

Controls default flow direction, spacing, iteration budgets of the
iterative strategies, the auto-selection thresholds and the envelope
used by layout diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from workflow_designer.config.base import BaseConfig, ConfigField, FieldType, register_config
from workflow_designer.config.env_utils import read_env_defaults

DIRECTION_OPTIONS = [
    {"value": "LR", "label": "Left to Right"},
    {"value": "RL", "label": "Right to Left"},
    {"value": "TB", "label": "Top to Bottom"},
    {"value": "BT", "label": "Bottom to Top"},
]

ALIGN_OPTIONS = [
    {"value": "UL", "label": "Up / Left"},
    {"value": "UR", "label": "Up / Right"},
    {"value": "DL", "label": "Down / Left"},
    {"value": "DR", "label": "Down / Right"},
]


@register_config
@dataclass
class LayoutConfig(BaseConfig):
    """Defaults and limits for automatic graph layout."""

    default_direction: str = "LR"
    node_spacing: float = 50.0
    rank_spacing: float = 80.0
    align: str = "UL"
    margin: float = 20.0

    force_iterations: int = 300
    force_seed: int = 42
    stress_iterations: int = 300
    stress_epsilon: float = 1e-4

    auto_small_graph_max_nodes: int = 10
    auto_dense_complexity: float = 2.0
    auto_large_graph_min_nodes: int = 50

    overlap_padding: float = 20.0
    bounds_min: float = -1000.0
    bounds_max: float = 5000.0

    _ENV_MAP = {
        "default_direction": "WORKFLOW_LAYOUT_DIRECTION",
        "node_spacing": "WORKFLOW_LAYOUT_NODE_SPACING",
        "rank_spacing": "WORKFLOW_LAYOUT_RANK_SPACING",
        "align": "WORKFLOW_LAYOUT_ALIGN",
        "margin": "WORKFLOW_LAYOUT_MARGIN",
        "force_iterations": "WORKFLOW_LAYOUT_FORCE_ITERATIONS",
        "force_seed": "WORKFLOW_LAYOUT_FORCE_SEED",
        "stress_iterations": "WORKFLOW_LAYOUT_STRESS_ITERATIONS",
        "stress_epsilon": "WORKFLOW_LAYOUT_STRESS_EPSILON",
        "auto_small_graph_max_nodes": "WORKFLOW_LAYOUT_AUTO_SMALL_MAX_NODES",
        "auto_dense_complexity": "WORKFLOW_LAYOUT_AUTO_DENSE_COMPLEXITY",
        "auto_large_graph_min_nodes": "WORKFLOW_LAYOUT_AUTO_LARGE_MIN_NODES",
        "overlap_padding": "WORKFLOW_LAYOUT_OVERLAP_PADDING",
        "bounds_min": "WORKFLOW_LAYOUT_BOUNDS_MIN",
        "bounds_max": "WORKFLOW_LAYOUT_BOUNDS_MAX",
    }

    @classmethod
    def get_default_instance(cls) -> "LayoutConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults).sanitized()

    @classmethod
    def get_config_name(cls) -> str:
        return "layout"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflow Layout"

    @classmethod
    def get_description(cls) -> str:
        return "Automatic layout direction, spacing, iteration budgets and auto-selection thresholds."

    @classmethod
    def get_category(cls) -> str:
        return "workflow"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="default_direction",
                field_type=FieldType.SELECT,
                label="Default Direction",
                description="Flow direction used when the caller does not pass one",
                default="LR",
                options=DIRECTION_OPTIONS,
                group="layered",
            ),
            ConfigField(
                name="node_spacing",
                field_type=FieldType.NUMBER,
                label="Node Spacing",
                description="Gap between neighbouring nodes in the same rank (px)",
                default=50.0,
                min_value=0,
                max_value=1000,
                group="layered",
            ),
            ConfigField(
                name="rank_spacing",
                field_type=FieldType.NUMBER,
                label="Rank Spacing",
                description="Gap between consecutive ranks (px)",
                default=80.0,
                min_value=0,
                max_value=1000,
                group="layered",
            ),
            ConfigField(
                name="align",
                field_type=FieldType.SELECT,
                label="Alignment",
                description="Which neighbours a node aligns to and which side wins on conflicts",
                default="UL",
                options=ALIGN_OPTIONS,
                group="layered",
            ),
            ConfigField(
                name="margin",
                field_type=FieldType.NUMBER,
                label="Margin",
                description="Offset of the top-left-most node from the origin (px)",
                default=20.0,
                min_value=0,
                max_value=500,
                group="layered",
            ),
            ConfigField(
                name="force_iterations",
                field_type=FieldType.NUMBER,
                label="Force Iterations",
                description="Iteration cap of the force-directed strategy",
                default=300,
                min_value=1,
                max_value=5000,
                group="iterative",
            ),
            ConfigField(
                name="force_seed",
                field_type=FieldType.NUMBER,
                label="Force Seed",
                description="Random seed for the force-directed initial placement",
                default=42,
                group="iterative",
            ),
            ConfigField(
                name="stress_iterations",
                field_type=FieldType.NUMBER,
                label="Stress Iterations",
                description="Iteration cap of the stress-majorization strategy",
                default=300,
                min_value=1,
                max_value=5000,
                group="iterative",
            ),
            ConfigField(
                name="stress_epsilon",
                field_type=FieldType.NUMBER,
                label="Stress Epsilon",
                description="Relative stress improvement below which iteration stops",
                default=1e-4,
                min_value=0,
                max_value=1,
                group="iterative",
            ),
            ConfigField(
                name="auto_small_graph_max_nodes",
                field_type=FieldType.NUMBER,
                label="Small Graph Size",
                description="Graphs with at most this many nodes always use the layered layout",
                default=10,
                min_value=0,
                group="auto",
            ),
            ConfigField(
                name="auto_dense_complexity",
                field_type=FieldType.NUMBER,
                label="Dense Graph Ratio",
                description="Edges-per-node ratio above which the layered layout is chosen",
                default=2.0,
                min_value=0,
                group="auto",
            ),
            ConfigField(
                name="auto_large_graph_min_nodes",
                field_type=FieldType.NUMBER,
                label="Large Graph Size",
                description="Sparse graphs with more nodes than this use the force-directed layout",
                default=50,
                min_value=0,
                group="auto",
            ),
            ConfigField(
                name="overlap_padding",
                field_type=FieldType.NUMBER,
                label="Overlap Padding",
                description="Padding added around node boxes by layout diagnostics (px)",
                default=20.0,
                min_value=0,
                group="diagnostics",
            ),
            ConfigField(
                name="bounds_min",
                field_type=FieldType.NUMBER,
                label="Envelope Minimum",
                description="Smallest coordinate considered reasonable by layout diagnostics",
                default=-1000.0,
                group="diagnostics",
            ),
            ConfigField(
                name="bounds_max",
                field_type=FieldType.NUMBER,
                label="Envelope Maximum",
                description="Largest coordinate considered reasonable by layout diagnostics",
                default=5000.0,
                group="diagnostics",
            ),
        ]
