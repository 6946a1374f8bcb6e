"""FastAPI web server for claude-viz."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse

from .dashboard import Dashboard
from .hub import UpdateHub

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15.0

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

router = APIRouter()


def get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def _not_found(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=404)


async def event_stream(hub: UpdateHub, keepalive: float = KEEPALIVE_SECONDS) -> AsyncIterator[str]:
    """Yield SSE frames for every hub broadcast until the client goes away.

    The subscription is made on the first iteration and removed when the
    generator is closed, which Starlette does when the client disconnects.
    """
    queue = hub.subscribe()
    try:
        yield ": connected\n\n"
        while True:
            try:
                payload = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"data: {payload}\n\n"
    finally:
        hub.unsubscribe(queue)


# ── Routes ───────────────────────────────────────────────────────


@router.get("/")
async def index():
    """Serve the dashboard."""
    html_path = Path(__file__).parent / "static" / "index.html"
    if not html_path.exists():
        return _not_found("Frontend not found")
    return HTMLResponse(html_path.read_text(encoding="utf-8"))


@router.get("/api/plans")
async def get_plans(dashboard: Dashboard = Depends(get_dashboard)):
    """Return every plan on disk, newest first."""
    plans = await dashboard.list_plans()
    return [p.to_dict() for p in plans]


@router.get("/api/plans/{filename}")
async def get_plan(filename: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Return one plan with its rendered HTML and outline."""
    found = await dashboard.get_plan(filename)
    if found is None:
        return _not_found("Plan not found")

    plan, parsed = found
    return {**plan.to_dict(), "parsed": parsed.to_dict()}


@router.get("/api/plans/{filename}/history")
async def get_plan_history(filename: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Return the versions of a plan seen since startup."""
    history = dashboard.get_plan_history(filename)
    if history is None:
        return _not_found("No history found")
    return history.to_dict()


@router.get("/api/todos")
async def get_todos(dashboard: Dashboard = Depends(get_dashboard)):
    """Return the live todo session."""
    state = dashboard.get_todos()
    if state is None:
        return _not_found("No todo state available")
    return state.to_dict()


@router.get("/api/todos/stats")
async def get_todo_stats(dashboard: Dashboard = Depends(get_dashboard)):
    """Return task counts for the live todo session."""
    stats = dashboard.get_todo_stats()
    if stats is None:
        return _not_found("No todo state available")
    return stats.to_dict()


@router.get("/api/sessions")
async def get_sessions(dashboard: Dashboard = Depends(get_dashboard)):
    """Return archived sessions that have tasks, newest first."""
    sessions = await dashboard.list_sessions()
    return [s.to_dict() for s in sessions]


@router.get("/api/sessions/{filename}")
async def get_session(filename: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Return one archived session."""
    state = await dashboard.load_session(filename)
    if state is None:
        return _not_found("Session not found")
    return state.to_dict()


@router.get("/api/stream")
async def stream(dashboard: Dashboard = Depends(get_dashboard)):
    """Push plan and todo updates as server-sent events."""
    return StreamingResponse(
        event_stream(dashboard.hub),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


def create_app(dashboard: Dashboard | None = None) -> FastAPI:
    """Build the app around a dashboard, starting its watchers on startup."""
    if dashboard is None:
        dashboard = Dashboard()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await dashboard.start()
        try:
            yield
        finally:
            logger.info("Shutting down watchers")
            await dashboard.stop()

    app = FastAPI(title="claude-viz", version="0.1.0", lifespan=lifespan)
    app.state.dashboard = dashboard
    app.include_router(router)
    return app
