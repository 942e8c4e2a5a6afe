from typing import Any, Dict, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from dev.utils import api_request, console, say, styled_status

app = typer.Typer(help="Manage servers through a running API")

ApiOption = typer.Option(None, "--api", help="API base URL (default: MANAGER_URL or http://localhost:3000)")


def render_server(server: Dict[str, Any]):
    lines = [
        f"[bold]ID:[/bold] {server['id']}",
        f"[bold]Status:[/bold] {styled_status(server['status'])}",
        f"[bold]Address:[/bold] {server['address']}",
        f"[bold]Version:[/bold] {server['version']} ({server['type']})",
        f"[bold]Plan:[/bold] {server['plan']} - {server['ram']} GB / {server['cpuLimit']}% CPU / {server['storage']} GB",
        f"[bold]Players:[/bold] {server['currentPlayers']}/{server['maxPlayers']}",
    ]
    if server.get("modloader"):
        lines.append(f"[bold]Modloader:[/bold] {server['modloader']}")
    if server["status"] == "online":
        lines.append(f"[bold]CPU:[/bold] {server['cpuUsage']}% ({server['cpuPercent']}% of limit)")
        lines.append(f"[bold]RAM:[/bold] {server['ramUsage']} GB ({server['ramPercent']}%)")
        lines.append(f"[bold]Uptime:[/bold] {server['uptimeFormatted']}")

    console.print(Panel("\n".join(lines), title=server["name"], border_style="blue", expand=False))


def report_action(body: Dict[str, Any]):
    # success=false with a 200 means the server was already in that state
    if body.get("success"):
        say("success", body.get("message", "Done"))
    else:
        say("warning", body.get("message", "Nothing to do"))
    server = body.get("server")
    if server:
        say("info", f"{server['name']} is now {server['status']}")


@app.command("list")
def list_servers(api: Optional[str] = ApiOption):
    """List all servers."""
    body = api_request("GET", "/api/servers", api)
    servers = body.get("servers", [])
    if not servers:
        say("info", "No servers yet.")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Version")
    table.add_column("Plan")
    table.add_column("Status")
    table.add_column("Address")
    table.add_column("Players", justify="right")

    for server in servers:
        table.add_row(
            str(server["id"]),
            server["name"],
            server["type"],
            server["version"],
            server["plan"],
            styled_status(server["status"]),
            server["address"],
            f"{server['currentPlayers']}/{server['maxPlayers']}",
        )
    console.print(table)


@app.command("show")
def show_server(server_id: str, api: Optional[str] = ApiOption):
    """Show one server with its current metrics."""
    body = api_request("GET", f"/api/servers/{server_id}", api)
    render_server(body["server"])


@app.command("create")
def create_server(
    name: str = typer.Option(..., help="Display name"),
    version: str = typer.Option(..., help="Game version, e.g. 1.21"),
    server_type: str = typer.Option(..., "--type", help="vanilla, paper, spigot, fabric, quilt, forge or neoforge"),
    plan: str = typer.Option("Basique", help="Basique, Super or Gamer"),
    modloader: Optional[str] = typer.Option(None, help="Modloader version (modded types only)"),
    gamemode: Optional[str] = typer.Option(None, help="Default gamemode"),
    description: Optional[str] = typer.Option(None, help="MOTD shown on the status page"),
    api: Optional[str] = ApiOption,
):
    """Create a new server (offline until started)."""
    payload = {
        "name": name,
        "version": version,
        "serverType": server_type,
        "plan": plan,
        "modloaderVersion": modloader,
        "gamemode": gamemode,
        "description": description,
    }
    payload = {k: v for k, v in payload.items() if v is not None}

    body = api_request("POST", "/api/servers", api, json=payload)
    say("success", body.get("message", "Server created"))
    render_server(body["server"])


@app.command("delete")
def delete_server(
    server_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    api: Optional[str] = ApiOption,
):
    """Delete a server."""
    if not yes:
        typer.confirm(f"Delete server {server_id}?", abort=True)
    body = api_request("DELETE", f"/api/servers/{server_id}", api)
    say("success", body.get("message", "Server deleted"))


@app.command("start")
def start_server(server_id: str, api: Optional[str] = ApiOption):
    """Start a server."""
    report_action(api_request("POST", f"/api/servers/{server_id}/start", api))


@app.command("stop")
def stop_server(server_id: str, api: Optional[str] = ApiOption):
    """Stop a server."""
    report_action(api_request("POST", f"/api/servers/{server_id}/stop", api))


@app.command("restart")
def restart_server(server_id: str, api: Optional[str] = ApiOption):
    """Restart a server."""
    report_action(api_request("POST", f"/api/servers/{server_id}/restart", api))
