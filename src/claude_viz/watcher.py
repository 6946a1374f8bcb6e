"""Abstract base class for directory watchers."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


def now_ms() -> float:
    """Return the current time in epoch milliseconds."""
    return time.time() * 1000


def mtime_ms(path: Path) -> float:
    """Return a file's modification time in epoch milliseconds."""
    return path.stat().st_mtime_ns / 1_000_000


def coalesce_changes(changes: Iterable[tuple[Change, str]]) -> dict[str, set[Change]]:
    """Group one batch of changes by path, in path order."""
    grouped: dict[str, set[Change]] = {}
    for change, path in sorted(changes, key=lambda c: (c[1], c[0])):
        grouped.setdefault(path, set()).add(change)
    return grouped


class DirectoryWatcher(ABC):
    """Base class for watchers of one directory of Claude Code files.

    A watcher owns a single directory and the files in it ending in
    ``suffix``. Subscribers are plain callables; every update the watcher
    produces is passed to each of them in registration order. Change
    notifications come from ``watchfiles.awatch`` in batches, which
    subclasses turn into typed updates in ``process_changes``.
    """

    name: str  # "plans", "todos"
    suffix: str  # ".md", ".json"

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._subscribers: list[Subscriber] = []
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None
        self._stopped = False

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback for every update this watcher emits."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, update: Any) -> None:
        """Deliver an update to all subscribers. No-op once stopped."""
        if self._stopped:
            return
        for callback in list(self._subscribers):
            callback(update)

    @property
    def is_watching(self) -> bool:
        return self._task is not None and not self._task.done()

    def matching_files(self) -> list[Path]:
        """Return the files in the directory this watcher cares about."""
        if not self.directory.is_dir():
            return []
        return [
            p for p in self.directory.iterdir()
            if p.name.endswith(self.suffix) and p.is_file()
        ]

    async def start(self) -> None:
        """Prepare the directory, watch it, then load what is already there.

        The initial load runs after the notifier is registered, so a file
        written during startup is seen by at least one of the two.
        """
        self._stopped = False
        if not await self.prepare():
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._watch(), name=f"{self.name}-watcher")
        # awatch registers its notifier on the task's first step
        await asyncio.sleep(0)
        await self.load_initial()

    async def stop(self) -> None:
        """Stop watching. No update is emitted after this returns."""
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        self._stop_event = None

    def _accepts(self, change: Change, path: str) -> bool:
        return path.endswith(self.suffix)

    async def _watch(self) -> None:
        logger.info("Watching %s directory: %s", self.name, self.directory)
        try:
            async for changes in awatch(
                self.directory,
                watch_filter=self._accepts,
                stop_event=self._stop_event,
                recursive=False,
            ):
                await self.process_changes(changes)
        except Exception:
            logger.exception("%s watcher stopped unexpectedly", self.name)

    @abstractmethod
    async def prepare(self) -> bool:
        """Make sure the directory is usable. Return False to skip watching."""
        ...

    @abstractmethod
    async def load_initial(self) -> None:
        """Pick up the files that existed before watching started."""
        ...

    @abstractmethod
    async def process_changes(self, changes: set[tuple[Change, str]]) -> None:
        """Turn one batch of filesystem changes into updates."""
        ...
