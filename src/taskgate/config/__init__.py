"""Configuration — defaults, YAML files, environment and runtime overrides."""

from taskgate.config.hierarchy import load_config_hierarchy
from taskgate.config.loader import load_config_yaml
from taskgate.config.schema import DispatcherConfig

__all__ = ["DispatcherConfig", "load_config_hierarchy", "load_config_yaml"]
