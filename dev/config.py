import dataclasses

import typer
from rich.table import Table

from core.config import Settings, load_settings
from dev.utils import console, say, update_env_variable

app = typer.Typer(help="Inspect and edit the .env configuration")

SECRET_FIELDS = {"aternos_password", "pterodactyl_api_key"}


def env_name(field_name: str) -> str:
    return field_name.upper()


@app.command("show")
def show_config():
    """Show the effective settings (environment + .env)."""
    try:
        settings = load_settings()
    except ValueError as e:
        say("error", str(e))
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")

    for field in dataclasses.fields(settings):
        value = getattr(settings, field.name)
        if value is None:
            shown = "[dim]unset[/dim]"
        elif field.name in SECRET_FIELDS:
            shown = "********"
        else:
            shown = str(value)
        table.add_row(env_name(field.name), shown)

    console.print(table)


@app.command("set")
def set_config(key: str, value: str):
    """Set KEY=VALUE in .env."""
    known = {env_name(f.name) for f in dataclasses.fields(Settings)}
    key = key.upper()
    if key not in known:
        say("error", f"Unknown setting '{key}'")
        raise typer.Exit(code=1)
    update_env_variable(key, value)
