# mcp_promptgate/cli/servers_cli.py
import typer
from typing_extensions import Annotated
import json

from .utils_cli import make_api_request

app = typer.Typer(
    name="servers",
    help="Inspect and authorize configured external tool servers.",
    no_args_is_help=True
)


def _badge(authorized: bool) -> str:
    return typer.style("authorized", fg=typer.colors.GREEN) if authorized else typer.style("unauthorized", fg=typer.colors.RED)


@app.command("list")
def list_servers():
    """List configured servers with their authorization state."""
    servers = make_api_request("GET", "/api/mcp/servers", verbose=False)
    if not servers:
        typer.echo("No external servers are configured.")
        return
    for server in servers:
        details = server["authorization"]
        typer.echo(
            f"{server['name']:<24} {server.get('type') or '-':<12} "
            f"{_badge(details['is_authorized'])} ({details['method']})"
        )


@app.command("status")
def server_status(
    server_name: Annotated[str, typer.Argument(help="Name of the configured server.")]
):
    """Show every authorization tier for one server."""
    details = make_api_request("GET", f"/api/mcp/{server_name}/authorization", verbose=False)
    typer.echo(json.dumps(details, indent=2))


@app.command("authorize")
def authorize_server(
    server_name: Annotated[str, typer.Argument(help="Name of the configured server.")],
    open_browser: Annotated[bool, typer.Option("--open/--no-open", help="Open the authorization URL in a browser.")] = False
):
    """Start the OAuth flow for a server and print the URL to visit."""
    result = make_api_request("POST", f"/api/mcp/{server_name}/authorize", verbose=False)
    auth_url = result["authUrl"]
    typer.secho("Open this URL to authorize:", fg=typer.colors.CYAN)
    typer.echo(auth_url)
    if open_browser:
        typer.launch(auth_url)
