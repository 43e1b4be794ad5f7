"""
Environment helpers for config dataclasses.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from logging import getLogger
from typing import Any, Dict

logger = getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of the field default."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Dict[str, str],
    dataclass_fields: Dict[str, Field],
) -> Dict[str, Any]:
    """Build constructor kwargs from dataclass defaults overridden by env vars.

    Values that cannot be converted to the field's type are ignored
    (with a warning) and the dataclass default is kept.
    """
    values: Dict[str, Any] = {}
    for name, fld in dataclass_fields.items():
        if fld.default is not MISSING:
            default = fld.default
        elif fld.default_factory is not MISSING:  # type: ignore[misc]
            default = fld.default_factory()  # type: ignore[misc]
        else:
            continue

        env_name = env_map.get(name)
        raw = os.environ.get(env_name) if env_name else None
        if raw is None or raw == "":
            values[name] = default
            continue

        try:
            values[name] = _coerce(raw, default)
        except ValueError as e:
            logger.warning(f"Ignoring {env_name}={raw!r}: {e}")
            values[name] = default
    return values
