"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.taskgate/config.yaml)
  3. Project config   (./taskgate.yaml, searched upward from cwd)
  4. Environment variables (TASKGATE_<FIELD>)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from taskgate.config.defaults import get_defaults
from taskgate.config.schema import DispatcherConfig

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".taskgate" / "config.yaml"
_PROJECT_CONFIG_NAME = "taskgate.yaml"
_ENV_PREFIX = "TASKGATE_"

# One variable per DispatcherConfig field, e.g. TASKGATE_MAX_CONCURRENT
_ENV_MAP: dict[str, str] = {
    f"{_ENV_PREFIX}{name.upper()}": name for name in DispatcherConfig.model_fields
}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values. Runtime overrides
    left as None are treated as "not given".
    """
    config = get_defaults()

    project_path = _find_project_config()
    layers = (
        _load_yaml_config(_GLOBAL_CONFIG_PATH),
        _load_yaml_config(project_path) if project_path else None,
        _load_env_vars(),
        {key: value for key, value in runtime_overrides.items() if value is not None},
    )
    for layer in layers:
        if layer:
            config.update(layer)

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists.

    Accepts either a flat mapping or one nested under a ``taskgate:`` key.
    """
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    section = data.get("taskgate")
    return section if isinstance(section, dict) else data


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    candidates = (parent / _PROJECT_CONFIG_NAME for parent in (cwd, *cwd.parents))
    return next((c for c in candidates if c.exists()), None)


def _load_env_vars() -> dict[str, Any]:
    return {
        key: _coerce_env_value(key, os.environ[env_key])
        for env_key, key in _ENV_MAP.items()
        if env_key in os.environ
    }


def _coerce_env_value(key: str, value: str) -> Any:
    """Convert an env string to the type DispatcherConfig declares for ``key``.

    Unconvertible values are passed through so validation reports them.
    """
    field = DispatcherConfig.model_fields.get(key)
    target_type = field.annotation if field else None
    if target_type not in (int, float):
        return value
    try:
        return target_type(value)
    except ValueError:
        logger.warning(
            "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
        )
        return value
