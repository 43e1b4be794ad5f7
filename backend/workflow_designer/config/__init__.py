"""
Configuration Package.

Typed, env-overridable configuration dataclasses. Importing this
package registers every built-in config class.
"""

from workflow_designer.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config_class,
    list_config_classes,
    register_config,
)
from workflow_designer.config.sub_config.workflow.layout_config import LayoutConfig

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config_class",
    "list_config_classes",
    "register_config",
    "LayoutConfig",
]
