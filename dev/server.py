import dataclasses
from typing import Optional

import typer

from core.config import BACKENDS, load_settings
from dev.utils import banner, say

app = typer.Typer(help="Run the manager API")


@app.command("run")
def run_server(
    host: Optional[str] = typer.Option(None, help="Host to bind (default: HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default: PORT)"),
    backend: Optional[str] = typer.Option(None, help="Panel backend: local, aternos or pterodactyl"),
):
    """
    Start the Game Server Manager API
    """
    settings = load_settings()
    overrides = {}
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    if backend:
        backend = backend.lower()
        if backend not in BACKENDS:
            say("error", f"Unknown backend '{backend}', expected one of {', '.join(BACKENDS)}")
            raise typer.Exit(code=1)
        overrides["panel_backend"] = backend
    settings = dataclasses.replace(settings, **overrides)

    banner(f"Starting API ({settings.panel_backend} backend)")

    # Imported late so CLI commands that only talk HTTP do not build the app
    from run import serve
    serve(settings)
