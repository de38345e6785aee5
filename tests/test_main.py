"""Unit tests for main.py, the CLI entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from focusbell import __version__
from focusbell.config import TOKEN_ENV_VAR, AppConfig, ConfigManager
from focusbell.main import app, main
from focusbell.utils import exit_codes

runner = CliRunner()


class _BrokenManager:
    @property
    def config(self):
        raise RuntimeError("Failed to load config: bad json")


def _invoke(*args, **kwargs):
    return runner.invoke(app, list(args), **kwargs)


class TestTopLevel:
    def test_help(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "run" in result.output
        assert "version" in result.output

    def test_version(self):
        result = _invoke("version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_is_callable(self):
        assert callable(main)


class TestRun:
    def test_missing_token_exits_with_auth_failure(self, monkeypatch):
        monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
        result = _invoke("run")
        assert result.exit_code == exit_codes.ERROR_AUTH_FAILURE
        assert TOKEN_ENV_VAR in result.output

    def test_broken_config_exits_with_config_error(self, monkeypatch):
        monkeypatch.setenv(TOKEN_ENV_VAR, "token")
        with patch("focusbell.main.get_config_manager", return_value=_BrokenManager()):
            result = _invoke("run")
        assert result.exit_code == exit_codes.ERROR_CONFIG
        assert "Failed to load config" in result.output

    def test_unknown_log_level_exits_with_config_error(self, monkeypatch, tmp_path):
        monkeypatch.setenv(TOKEN_ENV_VAR, "token")
        (tmp_path / "config.json").write_text('{"log_level": "CHATTY"}')
        manager = ConfigManager(config_dir=tmp_path)
        with patch("focusbell.main.get_config_manager", return_value=manager):
            result = _invoke("run")
        assert result.exit_code == exit_codes.ERROR_CONFIG
        assert "Failed to load config" in result.output

    @pytest.fixture()
    def configured(self, monkeypatch):
        monkeypatch.setenv(TOKEN_ENV_VAR, "token")
        manager = MagicMock(config=AppConfig())
        with patch("focusbell.main.get_config_manager", return_value=manager):
            yield

    def test_commands_from_stdin(self, configured):
        result = _invoke("run", "--user", "alice", input="pomo 25 5 4\nstatus\npause\nquit\n")
        assert result.exit_code == 0
        assert "Focus session started!" in result.output
        assert "Paused" in result.output

    def test_unknown_lines_are_ignored(self, configured):
        result = _invoke("run", input="hello\nhelp\n")
        assert result.exit_code == 0
        assert "text only" in result.output

    def test_errors_are_reported(self, configured):
        result = _invoke("run", input="resume\n")
        assert result.exit_code == 0
        assert "You have no active session." in result.output
