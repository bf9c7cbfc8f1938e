"""Run the Verdict API with uvicorn."""

import os

import click
import uvicorn


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option(
    "--port",
    type=int,
    default=lambda: int(os.environ.get("VERDICT_PORT", "8000")),
    show_default="8000 or $VERDICT_PORT",
)
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool):
    """Serve the HTTP API (verdict.api:app)."""
    uvicorn.run(
        "verdict.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=os.environ.get("VERDICT_LOG_LEVEL", "info"),
    )
