"""Plan directory watcher.

Watches ~/.claude/plans/ for markdown plan files. Every pre-existing plan is
announced as "created" on startup, so a fresh subscriber sees the whole set
as a stream of creations before any live change arrives.

Update kinds:
- "created": a file this watcher has not announced yet. Carries full content.
- "modified": a known file changed, including one replaced by a rename
  (editors and atomic writers save that way). Carries full content.
- "deleted": file removed. Content is empty and lastModified is the event
  time, since the file can no longer be read.
"""

import asyncio
import logging
import os
from pathlib import Path

from watchfiles import Change

from ..config import get_plans_path
from ..core import PlanFile, PlanUpdate
from ..watcher import DirectoryWatcher, coalesce_changes, mtime_ms, now_ms

logger = logging.getLogger(__name__)


def read_plan(path: Path) -> PlanFile:
    """Read one plan file from disk."""
    content = path.read_text(encoding="utf-8")
    return PlanFile(
        filename=path.name,
        path=str(path),
        content=content,
        last_modified=mtime_ms(path),
    )


class PlanWatcher(DirectoryWatcher):
    """Watcher for Claude Code plan markdown files."""

    name = "plans"
    suffix = ".md"

    def __init__(self, directory: Path | None = None):
        super().__init__(directory or get_plans_path())
        self._known: set[str] = set()  # filenames announced and not deleted since

    async def prepare(self) -> bool:
        if not self.directory.is_dir():
            logger.warning("Plans directory doesn't exist: %s", self.directory)
            try:
                await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Failed to create plans directory %s: %s", self.directory, e)
                return False
            logger.info("Created plans directory: %s", self.directory)
        return True

    async def load_initial(self) -> None:
        self._known.clear()
        existing = await asyncio.to_thread(self.matching_files)
        for path in sorted(existing):
            await self.handle_file_change("created", path)

    async def process_changes(self, changes: set[tuple[Change, str]]) -> None:
        for path, kinds in coalesce_changes(changes).items():
            if Change.deleted in kinds and not os.path.exists(path):
                self.handle_file_delete(Path(path))
            elif Path(path).name in self._known or not kinds & {Change.added, Change.deleted}:
                await self.handle_file_change("modified", Path(path))
            else:
                await self.handle_file_change("created", Path(path))

    async def handle_file_change(self, kind: str, path: Path) -> None:
        """Read a plan and emit it. Read failures drop the event."""
        try:
            plan = await asyncio.to_thread(read_plan, path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading plan file %s: %s", path, e)
            return

        self._known.add(plan.filename)
        self.emit(PlanUpdate(kind=kind, file=plan, timestamp=now_ms()))

    def handle_file_delete(self, path: Path) -> None:
        self._known.discard(path.name)
        now = now_ms()
        plan = PlanFile(filename=path.name, path=str(path), content="", last_modified=now)
        self.emit(PlanUpdate(kind="deleted", file=plan, timestamp=now))

    async def list_plans(self) -> list[PlanFile]:
        """Return every plan currently on disk, newest first."""
        return await asyncio.to_thread(self._scan)

    def _scan(self) -> list[PlanFile]:
        plans = []
        try:
            paths = self.matching_files()
        except OSError as e:
            logger.error("Error listing plans: %s", e)
            return []

        for path in paths:
            try:
                plans.append(read_plan(path))
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Error reading plan file %s: %s", path, e)

        plans.sort(key=lambda p: p.last_modified, reverse=True)
        return plans
