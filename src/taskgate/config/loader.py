"""YAML config loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from taskgate.config.schema import DispatcherConfig


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw


def load_config_yaml(path: str | Path) -> DispatcherConfig:
    """Load a config YAML file and return a validated DispatcherConfig.

    The file must hold a top-level ``taskgate:`` mapping.
    """
    raw = load_yaml(path)

    if "taskgate" not in raw or not isinstance(raw["taskgate"], dict):
        raise ValueError(f"Invalid config YAML: missing top-level 'taskgate' key in {path}")

    return DispatcherConfig(**raw["taskgate"])
