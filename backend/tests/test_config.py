# backend/tests/test_config.py

import pytest

from workflow_designer.config import LayoutConfig, get_config_class, list_config_classes
from workflow_designer.workflow.layout import LayoutOptions
from workflow_designer.workflow.layout.base import LayoutAlign, LayoutDirection


@pytest.fixture
def clean_env(monkeypatch):
    for env_name in LayoutConfig._ENV_MAP.values():
        monkeypatch.delenv(env_name, raising=False)
    return monkeypatch


class TestEnvironment:

    def test_defaults_without_env(self, clean_env):
        assert LayoutConfig.get_default_instance() == LayoutConfig()

    def test_env_overrides_are_typed(self, clean_env):
        clean_env.setenv("WORKFLOW_LAYOUT_DIRECTION", "TB")
        clean_env.setenv("WORKFLOW_LAYOUT_NODE_SPACING", "75")
        clean_env.setenv("WORKFLOW_LAYOUT_FORCE_ITERATIONS", "120")
        config = LayoutConfig.get_default_instance()
        assert config.default_direction == "TB"
        assert config.node_spacing == 75.0
        assert isinstance(config.node_spacing, float)
        assert config.force_iterations == 120
        assert isinstance(config.force_iterations, int)

    def test_malformed_env_value_keeps_default(self, clean_env):
        clean_env.setenv("WORKFLOW_LAYOUT_RANK_SPACING", "wide")
        assert LayoutConfig.get_default_instance().rank_spacing == 80.0

    def test_empty_env_value_keeps_default(self, clean_env):
        clean_env.setenv("WORKFLOW_LAYOUT_MARGIN", "")
        assert LayoutConfig.get_default_instance().margin == 20.0

    def test_invalid_select_env_value_keeps_default(self, clean_env):
        clean_env.setenv("WORKFLOW_LAYOUT_DIRECTION", "lr")
        clean_env.setenv("WORKFLOW_LAYOUT_ALIGN", "TB")
        config = LayoutConfig.get_default_instance()
        assert config.default_direction == "LR"
        assert config.align == "UL"

    def test_out_of_range_env_value_keeps_default(self, clean_env):
        clean_env.setenv("WORKFLOW_LAYOUT_NODE_SPACING", "-5")
        clean_env.setenv("WORKFLOW_LAYOUT_RANK_SPACING", "120")
        config = LayoutConfig.get_default_instance()
        assert config.node_spacing == 50.0
        assert config.rank_spacing == 120.0


class TestValidation:

    def test_defaults_are_valid(self):
        assert LayoutConfig().validate() == []

    def test_select_field_rejects_unknown_option(self):
        errors = LayoutConfig(align="XX").validate()
        assert len(errors) == 1
        assert errors[0].startswith("Alignment must be one of")

    def test_number_field_range(self):
        errors = LayoutConfig(node_spacing=-5).validate()
        assert errors == ["Node Spacing must be >= 0"]

    def test_sanitized_resets_only_invalid_fields(self):
        config = LayoutConfig(align="XX", node_spacing=-5, rank_spacing=150).sanitized()
        assert config.align == "UL"
        assert config.node_spacing == 50.0
        assert config.rank_spacing == 150
        assert config.validate() == []

    def test_sanitized_valid_config_unchanged(self):
        config = LayoutConfig(margin=0)
        assert config.sanitized() is config

    def test_metadata_covers_every_field(self):
        names = {f.name for f in LayoutConfig.get_fields_metadata()}
        assert names == set(LayoutConfig.__dataclass_fields__)


class TestRegistry:

    def test_registered_under_name(self):
        assert get_config_class("layout") is LayoutConfig
        assert LayoutConfig in list_config_classes()

    def test_field_payload(self):
        payload = LayoutConfig.get_fields_metadata()[0].to_dict()
        assert payload["name"] == "default_direction"
        assert payload["type"] == "select"


class TestLayoutOptions:

    def test_options_from_config(self):
        options = LayoutOptions.from_config(LayoutConfig(default_direction="BT", align="DR", node_spacing=30))
        assert options.direction == LayoutDirection.BT
        assert options.align == LayoutAlign.DR
        assert options.spacing.node == 30
        assert options.spacing.rank == 80

    def test_resolve_keeps_explicit_fields(self):
        options = LayoutOptions(direction="TB").resolve(LayoutConfig(default_direction="RL", rank_spacing=120))
        assert options.direction == LayoutDirection.TB
        assert options.spacing.rank == 120
