"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from claude_viz.cli import main, open_browser
from claude_viz.config import dashboard_url


@pytest.fixture
def runner():
    return CliRunner()


def test_serve_defaults(runner, tmp_path):
    with patch("claude_viz.cli.uvicorn.run") as run:
        result = runner.invoke(main, [
            "serve", "--no-browser",
            "--plans-dir", str(tmp_path / "plans"),
            "--todos-dir", str(tmp_path / "todos"),
        ], env={"PORT": None})

    assert result.exit_code == 0, result.output
    assert "http://127.0.0.1:8888" in result.output
    _, kwargs = run.call_args
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 8888
    app = run.call_args.args[0]
    assert app.state.dashboard.plans.directory == tmp_path / "plans"
    assert app.state.dashboard.todos.directory == tmp_path / "todos"


def test_port_option(runner):
    with patch("claude_viz.cli.uvicorn.run") as run:
        result = runner.invoke(main, ["serve", "--no-browser", "--port", "3000"])
    assert result.exit_code == 0, result.output
    assert run.call_args.kwargs["port"] == 3000


def test_port_from_environment(runner):
    with patch("claude_viz.cli.uvicorn.run") as run:
        result = runner.invoke(main, ["serve", "--no-browser"], env={"PORT": "9999"})
    assert result.exit_code == 0, result.output
    assert run.call_args.kwargs["port"] == 9999


@pytest.mark.parametrize("port", ["0", "70000", "abc"])
def test_invalid_port_exits_before_serving(runner, port):
    with patch("claude_viz.cli.uvicorn.run") as run:
        result = runner.invoke(main, ["serve", "--no-browser", "--port", port])
    assert result.exit_code == 2
    assert "Invalid value" in result.output
    run.assert_not_called()


def test_unknown_view_is_rejected(runner):
    with patch("claude_viz.cli.uvicorn.run") as run:
        result = runner.invoke(main, ["serve", "kanban"])
    assert result.exit_code == 2
    run.assert_not_called()


def test_view_selects_browser_url(runner):
    with (
        patch("claude_viz.cli.uvicorn.run"),
        patch("claude_viz.cli.threading.Timer") as timer,
    ):
        result = runner.invoke(main, ["serve", "todo", "--port", "8123"])

    assert result.exit_code == 0, result.output
    assert timer.call_args.kwargs["args"] == ("http://127.0.0.1:8123?tab=todos",)
    timer.return_value.start.assert_called_once()


def test_open_browser_failure_is_not_fatal(capsys):
    with patch("claude_viz.cli.webbrowser.open", return_value=False):
        open_browser("http://localhost:8888")
    assert "Please open manually: http://localhost:8888" in capsys.readouterr().out


@pytest.mark.parametrize("view,expected", [
    (None, "http://127.0.0.1:8888"),
    ("plan", "http://127.0.0.1:8888?tab=plans"),
    ("todo", "http://127.0.0.1:8888?tab=todos"),
])
def test_dashboard_url(view, expected):
    assert dashboard_url("127.0.0.1", 8888, view) == expected


def test_dashboard_url_wildcard_host():
    assert dashboard_url("0.0.0.0", 8888) == "http://localhost:8888"
