"""CLI entry point for claude-viz."""

import logging
import threading
import webbrowser
from pathlib import Path

import click
import uvicorn

from .config import DEFAULT_HOST, DEFAULT_PORT, dashboard_url
from .dashboard import Dashboard
from .server import create_app

logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.5


def open_browser(url: str) -> None:
    """Open the dashboard in a browser. Failure is never fatal."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning("Could not auto-open browser: %s", e)
        opened = False
    if not opened:
        click.echo(f"Please open manually: {url}")


@click.group()
def main():
    """Live dashboards for Claude Code plans and todos."""
    pass


@main.command()
@click.argument("view", required=False, type=click.Choice(["plan", "todo"]))
@click.option("--port", default=DEFAULT_PORT, envvar="PORT", show_default=True,
              type=click.IntRange(1, 65535), help="Port to serve on (or $PORT).")
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="Host to bind to.")
@click.option("--plans-dir", type=click.Path(file_okay=False, path_type=Path),
              help="Plans directory to watch.")
@click.option("--todos-dir", type=click.Path(file_okay=False, path_type=Path),
              help="Todos directory to watch.")
@click.option("--no-browser", is_flag=True, help="Don't open a browser.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def serve(view: str | None, port: int, host: str, plans_dir: Path | None,
          todos_dir: Path | None, no_browser: bool, debug: bool):
    """Start the dashboard. VIEW opens directly to the plans or todos tab."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
    )

    url = dashboard_url(host, port, view)
    app = create_app(Dashboard(plans_dir=plans_dir, todos_dir=todos_dir))

    click.echo(f"Starting claude-viz on http://{host}:{port}")
    click.echo(f"  Plans tab:  {dashboard_url(host, port, 'plan')}")
    click.echo(f"  Todos tab:  {dashboard_url(host, port, 'todo')}")

    if not no_browser:
        timer = threading.Timer(BROWSER_DELAY_SECONDS, open_browser, args=(url,))
        timer.daemon = True
        timer.start()

    uvicorn.run(app, host=host, port=port, reload=False)
