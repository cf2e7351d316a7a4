"""Tests for the command-line entry point and logging setup."""

import io
import json
import logging
from unittest.mock import patch

import pytest

import cli
from logging_config import LOGGER_NAME, resolve_level, setup_logging


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep a developer's .env and logging setup out of CLI runs."""
    for name in ("JIRA_HOST", "JIRA_BASE_URL", "JIRA_EMAIL", "JIRA_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    with patch("cli.load_dotenv") as load_dotenv, patch("cli.setup_logging") as setup:
        yield load_dotenv, setup


@pytest.fixture
def jira_env(monkeypatch):
    monkeypatch.setenv("JIRA_HOST", "test.atlassian.net")
    monkeypatch.setenv("JIRA_EMAIL", "test@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "secret")


def test_tools_lists_catalog_without_config(capsys):
    cli.main(["tools"])
    out = capsys.readouterr().out
    assert "create_issue: Create a new Jira issue" in out
    assert len(out.strip().splitlines()) == 11


def test_call_prints_payload(capsys, jira_env, dispatcher, mock_client):
    with patch("cli.build_dispatcher", return_value=dispatcher) as build:
        cli.main(["call", "get_issue", "--args", '{"issueKey": "TEST-1"}'])

    assert build.call_args.args[0].base_url == "https://test.atlassian.net"
    assert json.loads(capsys.readouterr().out)["key"] == "TEST-1"
    mock_client.get_issue.assert_called_once_with("TEST-1")


def test_call_error_exits_with_code(capsys, jira_env, dispatcher):
    with patch("cli.build_dispatcher", return_value=dispatcher):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["call", "no_such_tool"])

    assert exc_info.value.code == 1
    assert 'Error -32601: Tool "no_such_tool" not found.' in capsys.readouterr().err


def test_missing_config_is_fatal(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["call", "list_fields"])

    assert exc_info.value.code == 1
    assert "JIRA_HOST" in capsys.readouterr().err


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
def test_bad_args_json_is_usage_error(raw):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["call", "get_issue", "--args", raw])
    assert exc_info.value.code == 2


def test_serve_is_default_command(jira_env):
    with patch("cli.serve") as serve:
        cli.main([])
    serve.assert_called_once()
    assert serve.call_args.args[0].email == "test@example.com"


def test_env_file_and_verbose(isolated_env, jira_env, tmp_path):
    load_dotenv, setup = isolated_env
    env_file = tmp_path / ".env"
    env_file.write_text("JIRA_HOST=from-file\n")

    with patch("cli.serve"):
        cli.main(["--env-file", str(env_file), "-v", "serve"])

    load_dotenv.assert_called_once_with(str(env_file), override=True)
    setup.assert_called_once_with("DEBUG")


class TestLoggingConfig:
    def test_resolve_level(self, monkeypatch):
        monkeypatch.delenv("JIRA_MCP_LOG_LEVEL", raising=False)
        assert resolve_level() == logging.INFO
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(logging.ERROR) == logging.ERROR
        assert resolve_level("chatty") == logging.INFO
        monkeypatch.setenv("JIRA_MCP_LOG_LEVEL", "WARNING")
        assert resolve_level() == logging.WARNING

    def test_setup_logging_replaces_handler(self):
        logger = logging.getLogger(LOGGER_NAME)
        saved_handlers, saved_level = list(logger.handlers), logger.level
        stream = io.StringIO()
        try:
            setup_logging("INFO", stream=stream)
            setup_logging("INFO", stream=stream)
            assert len(logger.handlers) == 1

            logging.getLogger(f"{LOGGER_NAME}.dispatcher").info("Tool get_issue executed successfully.")
            assert "[INFO] [jira-mcp.dispatcher] Tool get_issue executed successfully." in stream.getvalue()
        finally:
            logger.handlers = saved_handlers
            logger.setLevel(saved_level)
