"""Todo session watcher.

Reads TodoWrite session files from ~/.claude/todos/. Each file is a JSON
array of task records written by Claude Code:

    [{"content": "Run build", "status": "in_progress", "priority": "high", "id": "1"}]

The live session is the file with the most recent modification time. Any
added or changed JSON file triggers a reload of whichever file is newest,
and the resulting state replaces the previous one wholesale.

Known limitation: ``activeForm`` is derived with a small English heuristic,
so irregular verbs inflect wrongly ("Fix" becomes "Fixxing").
"""

import asyncio
import json
import logging
import re
from pathlib import Path

from watchfiles import Change

from ..config import get_todos_path
from ..core import SessionSummary, TodoState, TodoTask
from ..watcher import DirectoryWatcher, mtime_ms, now_ms

logger = logging.getLogger(__name__)

NO_SESSION = "no-session"
MAX_SESSIONS = 50

_CVC_RE = re.compile(r"[^aeiou][aeiou][^aeiou]$")

# Errors that mean "this file can't be used right now": vanished, unreadable,
# not JSON, or JSON of the wrong shape (parse_session raises ValueError).
_LOAD_ERRORS = (OSError, ValueError)


def map_status(status) -> str:
    """Map an external status to an internal one. Unknown values are done."""
    if status in ("pending", "in_progress"):
        return status
    return "completed"


def generate_active_form(content: str) -> str:
    """Turn "Run build" into "Running build" by inflecting the first word."""
    if not content:
        return content

    first, *rest = content.split(" ")
    if first.endswith("e"):
        active = first[:-1] + "ing"
    elif _CVC_RE.search(first):
        active = first + first[-1] + "ing"
    else:
        active = first + "ing"

    return " ".join([active, *rest])


def session_id_from_filename(filename: str) -> str:
    return filename.split("-")[0]


def parse_session(path: Path) -> TodoState:
    """Parse one session file into a TodoState.

    Raises OSError if the file can't be read and ValueError if it is not
    JSON or not an array of task records.
    """
    modified = mtime_ms(path)
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"expected a JSON array, got {type(records).__name__}")

    tasks = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"task {i} is a {type(record).__name__}, not an object")
        content = str(record.get("content") or "")
        tasks.append(TodoTask(
            content=content,
            active_form=generate_active_form(content),
            status=map_status(record.get("status")),
            timestamp=modified,
        ))

    return TodoState(
        session_id=session_id_from_filename(path.name),
        tasks=tasks,
        last_updated=modified,
    )


class TodoWatcher(DirectoryWatcher):
    """Watcher that tracks the live TodoWrite session."""

    name = "todos"
    suffix = ".json"

    def __init__(self, directory: Path | None = None):
        super().__init__(directory or get_todos_path())
        self._state: TodoState | None = None

    def get_state(self) -> TodoState | None:
        """Return the live session, or None if nothing has loaded yet."""
        return self._state

    async def prepare(self) -> bool:
        if not self.directory.is_dir():
            # Claude Code may simply not have run yet
            logger.warning("Todos directory doesn't exist: %s", self.directory)
            return False

        return True

    async def load_initial(self) -> None:
        await self.reload()

    async def process_changes(self, changes: set[tuple[Change, str]]) -> None:
        if not any(change in (Change.added, Change.modified) for change, _ in changes):
            return

        if await self.reload():
            self.emit(self._state)

    async def reload(self) -> bool:
        """Re-derive the live session from the newest file.

        On any error the previous state is kept and False is returned.
        """
        try:
            state, source = await asyncio.to_thread(self._load_latest)
        except _LOAD_ERRORS as e:
            logger.error("Error loading todo state: %s", e)
            return False

        self._state = state
        if source:
            logger.info("Loaded %d todos from %s", len(state.tasks), source)
        return True

    def _load_latest(self) -> tuple[TodoState, str | None]:
        candidates = []
        for path in self.matching_files():
            try:
                candidates.append((mtime_ms(path), path.name, path))
            except FileNotFoundError:
                continue

        if not candidates:
            return TodoState(session_id=NO_SESSION, tasks=[], last_updated=now_ms()), None

        # Equal mtimes: the lexicographically greatest filename wins
        _, name, path = max(candidates, key=lambda c: (c[0], c[1]))
        return parse_session(path), name

    async def list_sessions(self) -> list[SessionSummary]:
        """Return up to 50 sessions that have tasks, newest first."""
        return await asyncio.to_thread(self._scan_sessions)

    def _scan_sessions(self) -> list[SessionSummary]:
        sessions = []
        try:
            paths = self.matching_files()
        except OSError as e:
            logger.error("Error listing sessions: %s", e)
            return []

        for path in paths:
            try:
                modified = mtime_ms(path)
                records = json.loads(path.read_text(encoding="utf-8"))
            except _LOAD_ERRORS as e:
                logger.error("Error reading session %s: %s", path.name, e)
                continue

            task_count = len(records) if isinstance(records, list) else 0
            if task_count == 0:
                continue
            sessions.append(SessionSummary(
                filename=path.name,
                last_updated=modified,
                task_count=task_count,
            ))

        sessions.sort(key=lambda s: s.last_updated, reverse=True)
        return sessions[:MAX_SESSIONS]

    async def load_session(self, filename: str) -> TodoState | None:
        """Parse one archived session without touching the live state."""
        # Only bare session filenames inside the todos directory
        if Path(filename).name != filename or not filename.endswith(self.suffix):
            return None

        try:
            return await asyncio.to_thread(parse_session, self.directory / filename)
        except _LOAD_ERRORS as e:
            logger.error("Error loading session %s: %s", filename, e)
            return None
