import os
from typing import Any, Dict, Optional

import requests
import typer
from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

# Custom theme for the CLI
custom_theme = Theme({
    "info": "dim cyan",
    "warning": "magenta",
    "error": "bold red",
    "success": "bold green",
    "header": "bold white on blue",
})

console = Console(theme=custom_theme)

DEFAULT_API_URL = "http://localhost:3000"

STATUS_STYLES = {
    "online": "green",
    "starting": "yellow",
    "stopping": "yellow",
    "offline": "red",
}


MARKS = {
    "success": "✔",
    "error": "✖",
    "info": "ℹ",
    "warning": "⚠",
}


def banner(text: str):
    console.print(Panel(text, style="header", expand=False))


def say(kind: str, text: str):
    """One themed line, prefixed with the mark for its kind."""
    console.print(f"[{kind}]{MARKS[kind]} {text}[/{kind}]")


def styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def api_url(override: Optional[str] = None) -> str:
    return (override or os.getenv("MANAGER_URL") or DEFAULT_API_URL).rstrip("/")


def api_request(method: str, path: str, base_url: Optional[str] = None, **kwargs) -> Dict[str, Any]:
    """
    Calls the manager API and returns the decoded body.

    Transport failures and error responses are printed and abort the command
    with exit code 1. A 200 with success=false (no-op action) is returned as is.
    """
    url = f"{api_url(base_url)}{path}"
    try:
        response = requests.request(method, url, timeout=10, **kwargs)
    except requests.exceptions.RequestException as e:
        say("error", f"Cannot reach API at {api_url(base_url)}: {e}")
        raise typer.Exit(code=1)

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.status_code >= 400:
        say("error", body.get("message") or f"HTTP {response.status_code}")
        raise typer.Exit(code=1)
    return body


def update_env_variable(key: str, value: str, env_path: Optional[str] = None):
    """
    Sets KEY=value in a .env file, in place if the key is already there,
    appended otherwise. Comments and other keys are left untouched.
    """
    env_path = env_path or os.path.join(os.getcwd(), ".env")
    lines = []
    if os.path.exists(env_path):
        with open(env_path, "r") as f:
            lines = f.read().splitlines()

    entry = f"{key}={value}"
    replaced = False
    for i, line in enumerate(lines):
        name, sep, _ = line.partition("=")
        if sep and not line.lstrip().startswith("#") and name.strip() == key:
            lines[i] = entry
            replaced = True
    if not replaced:
        lines.append(entry)

    with open(env_path, "w") as f:
        f.write("\n".join(lines) + "\n")

    say("success", f"{'Updated' if replaced else 'Added'} {entry} in {os.path.basename(env_path)}")
