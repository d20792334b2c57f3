"""Tests for CLI commands."""
import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from planq.cli import cli
from planq.cli.config import config
from planq.config import Config, set_config
from planq.pane import ProcessStartError


@pytest.fixture
def runner():
    """Provide a Click test runner."""
    return CliRunner()


def test_config_show_toml(runner, reset_global_config):
    """Test planq config show command with TOML output."""
    set_config(Config(
        tui={"tick_interval_ms": 50, "prefix_key": "ctrl+b"},
        panes={"left_command": "bash", "right_command": "htop"},
    ))

    result = runner.invoke(config, ['show'])

    assert result.exit_code == 0
    output = result.output
    assert "[tui]" in output
    assert "[panes]" in output
    assert "[logging]" in output
    assert "tick_interval_ms = 50" in output
    assert 'prefix_key = "ctrl+b"' in output
    assert 'left_command = "bash"' in output
    assert 'right_command = "htop"' in output


def test_config_show_env(runner, reset_global_config):
    """Test planq config show --format=env command."""
    set_config(Config(
        tui={"quit_key": "x"},
        logging={"level": "DEBUG", "log_file": "/tmp/planq.log"},
    ))

    result = runner.invoke(config, ['show', '--format', 'env'])

    assert result.exit_code == 0
    lines = set(result.output.strip().split('\n'))
    assert lines == {
        "PLANQ_TUI_TICK_INTERVAL_MS=33",
        "PLANQ_TUI_PREFIX_KEY=ctrl+a",
        "PLANQ_TUI_SWITCH_KEY=tab",
        "PLANQ_TUI_QUIT_KEY=x",
        "PLANQ_PANES_LEFT_COMMAND=claude",
        "PLANQ_PANES_RIGHT_COMMAND=claude",
        "PLANQ_PANES_TERM=xterm-256color",
        "PLANQ_LOGGING_LEVEL=DEBUG",
        "PLANQ_LOGGING_LOG_FILE=/tmp/planq.log",
    }


def test_config_show_invalid_format(runner):
    """Unknown formats are rejected by click."""
    result = runner.invoke(config, ['show', '--format', 'yaml'])

    assert result.exit_code != 0
    assert "Invalid value" in result.output


def test_split_requires_tty(runner):
    """split refuses to run without an interactive terminal."""
    with patch('planq.cli.split.run_tui') as mock_run:
        result = runner.invoke(cli, ['split'])

    assert result.exit_code != 0
    assert "interactive terminal" in result.output
    mock_run.assert_not_called()


def test_split_passes_commands(runner, reset_global_config):
    """split hands the pane command lines and the config to the TUI."""
    current = Config()
    set_config(current)

    with patch('planq.cli.split._is_interactive', return_value=True), \
            patch('planq.cli.split.run_tui', return_value=None) as mock_run:
        result = runner.invoke(cli, ['split', '--left', 'bash', '--right', 'htop -d 10'])

    assert result.exit_code == 0
    mock_run.assert_called_once_with('bash', 'htop -d 10', config=current)


def test_split_reports_startup_failure(runner, reset_global_config):
    """A pane startup failure becomes a non-zero exit with a message."""
    set_config(Config())
    error = ProcessStartError("starting nope: No such file or directory")
    with patch('planq.cli.split._is_interactive', return_value=True), \
            patch('planq.cli.split.run_tui', return_value=error):
        result = runner.invoke(cli, ['split'])

    assert result.exit_code == 1
    assert "running TUI: starting nope" in result.output


def test_log_level_sets_environment(runner, monkeypatch):
    """--log-level is forwarded through PLANQ_LOGGING_LEVEL."""
    monkeypatch.setenv("PLANQ_LOGGING_LEVEL", "INFO")

    result = runner.invoke(cli, ['--log-level', 'DEBUG', 'config', '--help'])

    assert result.exit_code == 0
    assert os.environ["PLANQ_LOGGING_LEVEL"] == "DEBUG"


def test_split_reports_invalid_key_binding(runner, reset_global_config, monkeypatch, tmp_path):
    """A bad chord in the configuration is reported without a traceback."""
    set_config(None)
    monkeypatch.setenv("PLANQ_CONFIG_FILE", str(tmp_path / "missing.toml"))
    monkeypatch.setenv("PLANQ_TUI_PREFIX_KEY", "hyper+a")

    with patch('planq.cli.split._is_interactive', return_value=True), \
            patch('planq.cli.split.run_tui') as mock_run:
        result = runner.invoke(cli, ['split'])

    assert result.exit_code == 1
    assert "invalid configuration" in result.output
    assert "hyper" in result.output
    assert not isinstance(result.exception, ValueError)
    mock_run.assert_not_called()
