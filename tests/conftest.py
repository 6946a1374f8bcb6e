"""Shared test fixtures for claude-viz."""

import json
import os
from datetime import datetime, timezone

import pytest

from claude_viz.dashboard import Dashboard

BASE_TIME = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc).timestamp()


def set_mtime(path, offset_seconds: float = 0) -> None:
    """Pin a file's mtime to BASE_TIME + offset."""
    ts = BASE_TIME + offset_seconds
    os.utime(path, (ts, ts))


def write_session(todos_dir, filename, records, offset_seconds: float = 0):
    """Write a TodoWrite session file with a fixed mtime."""
    path = todos_dir / filename
    path.write_text(json.dumps(records), encoding="utf-8")
    set_mtime(path, offset_seconds)
    return path


@pytest.fixture
def tmp_plans_dir(tmp_path):
    """Create a synthetic plans directory with two plans."""
    plans = tmp_path / "plans"
    plans.mkdir()

    older = plans / "refactor-auth.md"
    older.write_text(
        "# Refactor Auth\n"
        "\n"
        "Split the auth module.\n"
        "\n"
        "## Steps\n"
        "1. Extract token validation\n"
        "2. Add tests\n",
        encoding="utf-8",
    )
    set_mtime(older, 0)

    newer = plans / "dark-mode.md"
    newer.write_text("# Dark Mode\n\n- Add CSS variables\n", encoding="utf-8")
    set_mtime(newer, 60)

    # Not a plan
    (plans / "notes.txt").write_text("ignore me", encoding="utf-8")

    return plans


@pytest.fixture
def tmp_todos_dir(tmp_path):
    """Create a synthetic todos directory with three sessions."""
    todos = tmp_path / "todos"
    todos.mkdir()

    write_session(todos, "session001-agent-session001.json", [
        {"content": "Write tests", "status": "completed", "priority": "high", "id": "1"},
        {"content": "Run build", "status": "in_progress", "priority": "medium", "id": "2"},
        {"content": "Update docs", "status": "pending", "priority": "low", "id": "3"},
    ], offset_seconds=0)

    write_session(todos, "session002-agent-session002.json", [
        {"content": "Fix login bug", "status": "pending", "priority": "high", "id": "1"},
        {"content": "Deploy", "status": "bogus", "priority": "high", "id": "2"},
    ], offset_seconds=120)

    # Well-formed but empty: hidden from the session listing
    write_session(todos, "session003-agent-session003.json", [], offset_seconds=30)

    return todos


@pytest.fixture
def dashboard(tmp_plans_dir, tmp_todos_dir):
    """A dashboard over the synthetic directories, watchers not started."""
    return Dashboard(plans_dir=tmp_plans_dir, todos_dir=tmp_todos_dir)
