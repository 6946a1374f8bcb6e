"""Update hub: plan history and fan-out to stream subscribers."""

import asyncio
import json
import logging
from collections import deque

from .core import PLAN_HISTORY_LIMIT, PlanHistory, PlanUpdate, PlanVersion, TodoState

logger = logging.getLogger(__name__)

SUBSCRIBER_QUEUE_SIZE = 1000


class UpdateHub:
    """Records derived state from watcher updates and broadcasts them.

    Each subscriber is a bounded queue of JSON-encoded messages. Delivery is
    fire-and-forget: a full queue drops the message for that subscriber only,
    and nothing ever waits on a slow consumer.
    """

    def __init__(self, history_limit: int = PLAN_HISTORY_LIMIT,
                 queue_size: int = SUBSCRIBER_QUEUE_SIZE):
        self.history_limit = history_limit
        self.queue_size = queue_size
        self._history: dict[str, deque[PlanVersion]] = {}
        self._subscribers: list[asyncio.Queue[str]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[str]:
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.append(queue)
        logger.info("Stream client connected, active clients=%d", len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)
            logger.info("Stream client disconnected, active clients=%d", len(self._subscribers))

    def handle_plan_update(self, update: PlanUpdate) -> None:
        logger.info("Plan %s: %s", update.kind, update.file.filename)

        if update.kind != "deleted":
            versions = self._history.get(update.file.filename)
            if versions is None:
                versions = deque(maxlen=self.history_limit)
                self._history[update.file.filename] = versions
            versions.append(PlanVersion(content=update.file.content, timestamp=update.timestamp))

        self.broadcast({"type": "plan", "data": update.to_dict()})

    def handle_todo_update(self, state: TodoState) -> None:
        logger.info("Todos updated: %d tasks", len(state.tasks))
        self.broadcast({"type": "todo", "data": state.to_dict()})

    def get_history(self, filename: str) -> PlanHistory | None:
        versions = self._history.get(filename)
        if versions is None:
            return None
        return PlanHistory(filename=filename, versions=list(versions))

    def broadcast(self, message: dict) -> None:
        payload = json.dumps(message)
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning("Stream client queue full, dropping update")
