"""
Config Base — shared machinery for typed configuration dataclasses.

Every concrete config is a ``@dataclass`` subclass of ``BaseConfig``
decorated with ``@register_config``. Defaults are read from environment
variables through ``read_env_defaults`` and the class describes its own
fields through ``get_fields_metadata`` so a settings UI can render them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Type

logger = getLogger(__name__)


class FieldType(str, Enum):
    """Widget type used to edit a config field."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


@dataclass
class ConfigField:
    """Metadata describing one editable config field."""
    name: str
    field_type: FieldType
    label: str
    description: str = ""
    default: Any = None
    required: bool = False
    placeholder: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    group: str = "general"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type.value,
            "label": self.label,
            "description": self.description,
            "default": self.default,
            "required": self.required,
            "placeholder": self.placeholder,
            "options": self.options,
            "min": self.min_value,
            "max": self.max_value,
            "group": self.group,
        }


class BaseConfig(ABC):
    """Base class for all config dataclasses."""

    @classmethod
    @abstractmethod
    def get_default_instance(cls) -> "BaseConfig":
        ...

    @classmethod
    @abstractmethod
    def get_config_name(cls) -> str:
        ...

    @classmethod
    def get_display_name(cls) -> str:
        return cls.get_config_name()

    @classmethod
    def get_description(cls) -> str:
        return ""

    @classmethod
    def get_category(cls) -> str:
        return "general"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def _field_errors(self, meta: ConfigField) -> List[str]:
        value = getattr(self, meta.name, None)
        if meta.required and value in (None, ""):
            return [f"{meta.label} is required"]
        errors: List[str] = []
        if meta.field_type == FieldType.NUMBER and value is not None:
            if meta.min_value is not None and value < meta.min_value:
                errors.append(f"{meta.label} must be >= {meta.min_value}")
            if meta.max_value is not None and value > meta.max_value:
                errors.append(f"{meta.label} must be <= {meta.max_value}")
        if meta.field_type == FieldType.SELECT and meta.options:
            allowed = [o["value"] for o in meta.options]
            if value not in allowed:
                errors.append(f"{meta.label} must be one of {allowed}")
        return errors

    def validate(self) -> List[str]:
        """Check current values against the declared field metadata.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []
        for meta in self.get_fields_metadata():
            errors.extend(self._field_errors(meta))
        return errors

    def sanitized(self) -> "BaseConfig":
        """Return a copy with every invalid field reset to its declared default."""
        resets: Dict[str, Any] = {}
        for meta in self.get_fields_metadata():
            errors = self._field_errors(meta)
            if errors:
                logger.warning(
                    f"Config '{self.get_config_name()}': {'; '.join(errors)} "
                    f"(got {getattr(self, meta.name, None)!r}), using {meta.default!r}"
                )
                resets[meta.name] = meta.default
        return replace(self, **resets) if resets else self


# ============================================================================
# Registry
# ============================================================================

_CONFIG_REGISTRY: Dict[str, Type[BaseConfig]] = {}


def register_config(cls: Type[BaseConfig]) -> Type[BaseConfig]:
    """Class decorator: register a config class under its config name."""
    name = cls.get_config_name()
    if name in _CONFIG_REGISTRY and _CONFIG_REGISTRY[name] is not cls:
        logger.warning(f"Config '{name}' re-registered by {cls.__name__}")
    _CONFIG_REGISTRY[name] = cls
    return cls


def get_config_class(name: str) -> Optional[Type[BaseConfig]]:
    return _CONFIG_REGISTRY.get(name)


def list_config_classes() -> List[Type[BaseConfig]]:
    return list(_CONFIG_REGISTRY.values())
