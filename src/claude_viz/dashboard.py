"""Read access to plans, todos and history for one dashboard instance."""

import logging
import math
from pathlib import Path

from .core import ParsedPlan, PlanFile, PlanHistory, SessionSummary, TodoState, TodoStats
from .hub import UpdateHub
from .outline import parse_plan
from .watchers import PlanWatcher, TodoWatcher

logger = logging.getLogger(__name__)


def compute_stats(state: TodoState) -> TodoStats:
    """Count tasks by status. Percentage is 0 for an empty session."""
    pending = sum(1 for t in state.tasks if t.status == "pending")
    in_progress = sum(1 for t in state.tasks if t.status == "in_progress")
    completed = sum(1 for t in state.tasks if t.status == "completed")
    total = len(state.tasks)

    # Round half up, not to even
    percentage = math.floor(completed / total * 100 + 0.5) if total > 0 else 0

    return TodoStats(
        total=total,
        pending=pending,
        in_progress=in_progress,
        completed=completed,
        completion_percentage=percentage,
    )


class Dashboard:
    """One plan watcher, one todo watcher and the hub they feed.

    Everything the HTTP layer reads goes through this object, so separate
    instances (one per test, say) never share state.
    """

    def __init__(self, plans_dir: Path | None = None, todos_dir: Path | None = None):
        self.hub = UpdateHub()
        self.plans = PlanWatcher(plans_dir)
        self.todos = TodoWatcher(todos_dir)
        self.plans.subscribe(self.hub.handle_plan_update)
        self.todos.subscribe(self.hub.handle_todo_update)

    async def start(self) -> None:
        await self.plans.start()
        logger.info("Plan watcher started")
        await self.todos.start()
        logger.info("Todo watcher started")

    async def stop(self) -> None:
        await self.plans.stop()
        await self.todos.stop()

    async def list_plans(self) -> list[PlanFile]:
        return await self.plans.list_plans()

    async def get_plan(self, filename: str) -> tuple[PlanFile, ParsedPlan] | None:
        """Return a plan from the current listing and its parsed outline."""
        plans = await self.plans.list_plans()
        plan = next((p for p in plans if p.filename == filename), None)
        if plan is None:
            return None
        return plan, parse_plan(plan.content)

    def get_plan_history(self, filename: str) -> PlanHistory | None:
        return self.hub.get_history(filename)

    def get_todos(self) -> TodoState | None:
        return self.todos.get_state()

    def get_todo_stats(self) -> TodoStats | None:
        state = self.todos.get_state()
        if state is None:
            return None
        return compute_stats(state)

    async def list_sessions(self) -> list[SessionSummary]:
        return await self.todos.list_sessions()

    async def load_session(self, filename: str) -> TodoState | None:
        return await self.todos.load_session(filename)
