"""Path and port resolution for the watched Claude Code directories."""

import os
from pathlib import Path

DEFAULT_PORT = 8888
DEFAULT_HOST = "127.0.0.1"


def get_claude_home() -> Path:
    """Return the root of Claude Code's per-user data directory."""
    return Path.home() / ".claude"


def get_plans_path() -> Path:
    """Return the directory Claude Code writes plan markdown files to."""
    env = os.environ.get("CLAUDE_VIZ_PLANS_PATH")
    if env:
        return Path(env)

    return get_claude_home() / "plans"


def get_todos_path() -> Path:
    """Return the directory Claude Code writes TodoWrite session files to."""
    env = os.environ.get("CLAUDE_VIZ_TODOS_PATH")
    if env:
        return Path(env)

    return get_claude_home() / "todos"


def dashboard_url(host: str, port: int, view: str | None = None) -> str:
    """Return the URL to open for the requested initial view."""
    # 0.0.0.0 is not something a browser can open
    if host in ("0.0.0.0", "::"):
        host = "localhost"
    url = f"http://{host}:{port}"
    if view == "plan":
        return f"{url}?tab=plans"
    if view == "todo":
        return f"{url}?tab=todos"
    return url
