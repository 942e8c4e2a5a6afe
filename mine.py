from typing import Optional

import typer
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from dev import config, server, servers
from dev.utils import api_request, console, say, styled_status

# Initialize Typer
app = typer.Typer(help="Game Server Manager CLI Tool")
app.add_typer(server.app, name="server")
app.add_typer(servers.app, name="servers")
app.add_typer(config.app, name="config")


@app.command("status")
def public_status(address: str, api: Optional[str] = servers.ApiOption):
    """Public status of a server address (host or host:port)."""
    body = api_request("GET", f"/api/status/{address}", api)
    state = body.get("status", "offline")

    info = body.get("server")
    if info:
        text = (
            f"[bold]{info['name']}[/bold] ({info['version']})\n"
            f"{info.get('description') or ''}\n"
            f"[bold]Players:[/bold] {info['currentPlayers']}/{info['maxPlayers']}\n"
            f"[bold]Ping:[/bold] {info['ping']} ms"
        )
    else:
        text = body.get("message", "")

    console.print(Panel(
        f"{styled_status(state)}\n{text}",
        title=address,
        border_style="blue",
        expand=False,
    ))


@app.command("health")
def health(api: Optional[str] = servers.ApiOption):
    """Check that the API is up and its panel connected."""
    body = api_request("GET", "/api/health", api)
    connected = "[green]yes[/green]" if body.get("connected") else "[red]no[/red]"
    console.print(Panel(
        f"{body.get('message', '')}\n"
        f"[bold]Backend:[/bold] {body.get('backend')}\n"
        f"[bold]Connected:[/bold] {connected}\n"
        f"[bold]Servers:[/bold] {body.get('serversCount', 0)}",
        title="Health",
        border_style="blue",
        expand=False,
    ))


# --- Interactive Menu ---

@app.callback(invoke_without_command=True)
def main_interactive(ctx: typer.Context):
    """
    Main entry point. Launches interactive menu if no command is provided.
    """
    if ctx.invoked_subcommand is None:
        show_menu()


def show_menu():
    while True:
        console.clear()

        console.print(Panel.fit(
            "[bold white]Game Server Manager CLI[/bold white]\n[cyan]Manage servers through the API.[/cyan]",
            title="Welcome",
            border_style="blue"
        ))

        table = Table(show_header=True, header_style="bold magenta", expand=True)
        table.add_column("No.", style="dim", width=4, justify="center")
        table.add_column("Category", style="cyan", width=12)
        table.add_column("Action", style="white")
        table.add_column("Description", style="dim")

        table.add_row("1", "API", "Run", "Start the API in this terminal")
        table.add_row("2", "API", "Health", "Backend and connection state")
        table.add_row("3", "Servers", "List", "All servers with status")
        table.add_row("4", "Servers", "Start/Stop", "Change a server's state")
        table.add_row("5", "Status", "Lookup", "Public status of an address")
        table.add_row("6", "Config", "Show", "Effective settings")
        table.add_row("0", "Exit", "Quit", "Close the CLI")

        console.print(table)
        console.print("\n")

        choice = Prompt.ask("Select an option", choices=["1", "2", "3", "4", "5", "6", "0"], default="3")

        try:
            if choice == "1":
                server.run_server(host=None, port=None, backend=None)
            elif choice == "2":
                health(api=None)
            elif choice == "3":
                servers.list_servers(api=None)
            elif choice == "4":
                server_id = Prompt.ask("Server ID")
                action = Prompt.ask("Action", choices=["start", "stop", "restart"], default="start")
                servers.report_action(api_request("POST", f"/api/servers/{server_id}/{action}"))
            elif choice == "5":
                public_status(Prompt.ask("Address (host or host:port)"), api=None)
            elif choice == "6":
                config.show_config()
            elif choice == "0":
                console.print("[bold]Goodbye![/bold]")
                raise typer.Exit()
        except typer.Exit as e:
            if choice == "0":
                raise
            if e.exit_code:
                say("info", "Command failed, back to menu.")

        input("\nPress Enter to continue...")


if __name__ == "__main__":
    app()
