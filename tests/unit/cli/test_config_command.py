"""Tests for the config command group."""

import pytest
from click.testing import CliRunner

from phabstractic import __version__
from phabstractic.cli.main import main
from phabstractic.system import LoggerFactory, LoggingConfig, SystemConfig
from phabstractic.system import config as system_config


@pytest.fixture(autouse=True)
def reset_logging():
    """Commands configure logging; undo it after each test."""
    yield
    LoggerFactory.reset()


@pytest.fixture
def runner():
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Valid configuration file."""
    path = tmp_path / "phabstractic.yaml"
    path.write_text("events:\n  strict: true\nlogging:\n  level: DEBUG\n")
    return path


class TestMainGroup:
    """Tests for the top-level command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_config(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "config" in result.output

    def test_applies_logging_section(self, runner, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(system_config, "_system_config", SystemConfig(logging=LoggingConfig(level="ERROR")))

        result = runner.invoke(main, ["config", "show"])

        assert result.exit_code == 0
        assert LoggerFactory.is_configured()
        assert LoggerFactory.get_config().level == "ERROR"


class TestConfigShow:
    """Tests for `config show`."""

    def test_show_defaults(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(main, ["config", "show"])

        assert result.exit_code == 0
        assert "built-in defaults" in result.output
        assert "isolate_errors" in result.output

    def test_show_file(self, runner, config_file):
        result = runner.invoke(main, ["config", "show", "--path", str(config_file)])

        assert result.exit_code == 0
        assert "DEBUG" in result.output
        assert "true" in result.output

    def test_show_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["config", "show", "--path", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestConfigValidate:
    """Tests for `config validate`."""

    def test_valid_file(self, runner, config_file):
        result = runner.invoke(main, ["config", "validate", str(config_file)])

        assert result.exit_code == 0
        assert "Configuration valid" in result.output

    def test_invalid_value(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("events:\n  strict: maybe\n")

        result = runner.invoke(main, ["config", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_setting(self, runner, tmp_path):
        path = tmp_path / "unknown.yaml"
        path.write_text("events:\n  colour: blue\n")

        result = runner.invoke(main, ["config", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_malformed_yaml(self, runner, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("events: [unclosed\n")

        result = runner.invoke(main, ["config", "validate", str(path)])

        assert result.exit_code == 1

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["config", "validate", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "not found" in result.output
