"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

import logging

from taskgate.cli import _max_in_window, _resolve_log_level, cli


@pytest.fixture
def runner():
    return CliRunner()


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "taskgate" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestSimulateCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["simulate", "--help"])
        assert result.exit_code == 0
        assert "--max-concurrent" in result.output
        assert "--rps" in result.output

    def test_runs_and_reports(self, runner):
        result = runner.invoke(
            cli,
            ["simulate", "-n", "6", "--duration", "0.01", "--max-concurrent", "2",
             "--rps", "3", "--window", "0.1"],
        )
        assert result.exit_code == 0
        assert "Simulation Summary" in result.output
        assert "Peak concurrency" in result.output

    def test_reports_failures(self, runner):
        result = runner.invoke(
            cli,
            ["simulate", "-n", "4", "--duration", "0", "--fail-every", "2", "--rps", "100"],
        )
        assert result.exit_code == 0
        assert "Failed" in result.output

    def test_invalid_limit(self, runner):
        result = runner.invoke(cli, ["simulate", "--rps", "0"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestConfigCommand:
    def test_shows_table(self, runner):
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "Resolved Configuration" in result.output
        assert "requests_per_second" in result.output

    def test_reflects_env(self, runner, monkeypatch):
        monkeypatch.setenv("TASKGATE_MAX_CONCURRENT", "17")
        result = runner.invoke(cli, ["config"])
        assert "17" in result.output


class TestValidateConfigCommand:
    def test_valid_config(self, runner, sample_config_yaml):
        result = runner.invoke(cli, ["validate-config", str(sample_config_yaml)])
        assert result.exit_code == 0
        assert "Valid config" in result.output

    def test_invalid_config(self, runner, tmp_path):
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("not_taskgate:\n  foo: bar\n")
        result = runner.invoke(cli, ["validate-config", str(yaml_file)])
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_nonexistent_yaml(self, runner):
        result = runner.invoke(cli, ["validate-config", "nonexistent.yaml"])
        assert result.exit_code != 0


class TestMaxInWindow:
    def test_counts_densest_window(self):
        assert _max_in_window([0.0, 0.1, 0.2, 1.05, 1.1], 1.0) == 3

    def test_boundary_is_exclusive(self):
        assert _max_in_window([0.0, 1.0, 2.0], 1.0) == 1

    def test_empty(self):
        assert _max_in_window([], 1.0) == 0


class TestResolveLogLevel:
    def test_default_is_warning(self):
        assert _resolve_log_level(0) == logging.WARNING

    def test_configured_level_used_without_flags(self):
        assert _resolve_log_level(0, "DEBUG") == logging.DEBUG
        assert _resolve_log_level(0, "error") == logging.ERROR

    def test_verbose_flags_win(self):
        assert _resolve_log_level(1, "ERROR") == logging.INFO
        assert _resolve_log_level(2, "ERROR") == logging.DEBUG

    def test_unknown_level_falls_back(self):
        assert _resolve_log_level(0, "chatty") == logging.WARNING
