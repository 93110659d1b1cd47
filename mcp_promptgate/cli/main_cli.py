# mcp_promptgate/cli/main_cli.py
import asyncio
import json

import httpx
import typer
from typing_extensions import Annotated

from . import servers_cli
from .config import PROMPTGATE_CLI_HTTP_TIMEOUT
from ..oauth.discovery import DiscoveryResolver
from ..oauth.errors import DiscoveryError

# Main CLI application with help enabled when no arguments are provided
app = typer.Typer(
    name="promptgate",
    help="MCP PromptGate Command Line Interface.",
    no_args_is_help=True
)

# Register server commands under 'servers' subcommand
app.add_typer(servers_cli.app, name="servers")


@app.callback()
def main_callback():
    """
    MCP PromptGate main CLI application.
    Use 'promptgate servers --help' for server commands.
    """
    pass


async def _discover(resource_url: str, fetch_metadata: bool):
    async with httpx.AsyncClient(timeout=PROMPTGATE_CLI_HTTP_TIMEOUT) as http_client:
        resolver = DiscoveryResolver(http_client)
        metadata_url = await resolver.resolve_metadata_url(resource_url)
        metadata = None
        if fetch_metadata:
            metadata = await resolver.fetch_authorization_server_metadata(metadata_url)
        return metadata_url, metadata


@app.command("discover")
def discover(
    resource_url: Annotated[str, typer.Argument(help="URL of the protected MCP server.")],
    fetch_metadata: Annotated[bool, typer.Option("--metadata", help="Also load and print the metadata document.")] = False
):
    """Run OAuth metadata discovery locally against a resource URL."""
    try:
        metadata_url, metadata = asyncio.run(_discover(resource_url, fetch_metadata))
    except DiscoveryError as e:
        typer.secho(f"Discovery failed: {e.error_description}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(metadata_url)
    if metadata is not None:
        typer.echo(json.dumps(metadata.model_dump(exclude_none=True), indent=2))


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
