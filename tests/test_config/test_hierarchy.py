"""Tests for config hierarchy."""

from taskgate.config import hierarchy
from taskgate.config.hierarchy import (
    _coerce_env_value,
    _load_yaml_config,
    load_config_hierarchy,
)
from taskgate.config.schema import DispatcherConfig


class TestLoadConfigHierarchy:
    def test_returns_defaults(self):
        config = load_config_hierarchy()
        assert config["max_concurrent"] == 25
        assert config["requests_per_second"] == 40

    def test_runtime_overrides(self):
        config = load_config_hierarchy(max_concurrent=5, requests_per_second=10)
        assert config["max_concurrent"] == 5
        assert config["requests_per_second"] == 10

    def test_none_overrides_ignored(self):
        config = load_config_hierarchy(max_concurrent=None)
        assert config["max_concurrent"] == 25  # Default preserved

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("TASKGATE_REQUESTS_PER_SECOND", "12")
        config = load_config_hierarchy()
        assert config["requests_per_second"] == 12
        assert isinstance(config["requests_per_second"], int)

    def test_runtime_beats_env(self, monkeypatch):
        monkeypatch.setenv("TASKGATE_MAX_CONCURRENT", "8")
        config = load_config_hierarchy(max_concurrent=3)
        assert config["max_concurrent"] == 3  # Runtime wins

    def test_env_float_coercion(self, monkeypatch):
        monkeypatch.setenv("TASKGATE_WINDOW_SECONDS", "0.25")
        config = load_config_hierarchy()
        assert config["window_seconds"] == 0.25

    def test_project_config(self, tmp_path, monkeypatch):
        config_file = tmp_path / "taskgate.yaml"
        config_file.write_text("max_concurrent: 6\nbatch_size: 50\n")
        monkeypatch.chdir(tmp_path)
        config = load_config_hierarchy()
        assert config["max_concurrent"] == 6
        assert config["batch_size"] == 50

    def test_project_config_found_from_subdirectory(self, tmp_path, monkeypatch):
        (tmp_path / "taskgate.yaml").write_text("requests_per_second: 3\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_config_hierarchy()["requests_per_second"] == 3

    def test_global_config(self, tmp_path, monkeypatch):
        global_file = tmp_path / "global.yaml"
        global_file.write_text("max_concurrent: 2\nrequests_per_second: 4\n")
        monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", global_file)
        (tmp_path / "taskgate.yaml").write_text("requests_per_second: 9\n")
        monkeypatch.chdir(tmp_path)

        config = load_config_hierarchy()

        assert config["max_concurrent"] == 2
        assert config["requests_per_second"] == 9  # Project beats global


class TestLoadYamlConfig:
    def test_loads_valid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("key: value\n")
        result = _load_yaml_config(path)
        assert result == {"key": "value"}

    def test_unwraps_taskgate_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("taskgate:\n  max_concurrent: 3\n")
        assert _load_yaml_config(path) == {"max_concurrent": 3}

    def test_returns_none_for_missing(self, tmp_path):
        result = _load_yaml_config(tmp_path / "nonexistent.yaml")
        assert result is None

    def test_returns_none_for_non_dict(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- item1\n- item2\n")
        result = _load_yaml_config(path)
        assert result is None

    def test_returns_none_for_broken_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("key: [unclosed\n")
        assert _load_yaml_config(path) is None


class TestEnvVars:
    def test_every_config_field_has_env_var(self):
        assert set(hierarchy._ENV_MAP.values()) == set(DispatcherConfig.model_fields)
        assert hierarchy._ENV_MAP["TASKGATE_BATCH_DELAY"] == "batch_delay"

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("TASKGATE_LOG_LEVEL", "INFO")
        assert load_config_hierarchy()["log_level"] == "INFO"


class TestCoerceEnvValue:
    def test_unknown_key_passthrough(self):
        assert _coerce_env_value("not_a_field", "7") == "7"

    def test_int_coercion(self):
        assert _coerce_env_value("max_concurrent", "10") == 10

    def test_float_coercion(self):
        assert _coerce_env_value("batch_delay", "0.75") == 0.75

    def test_bad_number_passthrough(self):
        assert _coerce_env_value("max_concurrent", "many") == "many"

    def test_string_passthrough(self):
        assert _coerce_env_value("log_level", "DEBUG") == "DEBUG"
