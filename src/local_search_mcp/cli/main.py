"""
CLI for local-search-mcp.

Runs the MCP server on stdio and offers a few commands for inspecting the
configuration and calling tools by hand.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from local_search_mcp import __version__
from local_search_mcp.filesystem.tools import FileSystemTools
from local_search_mcp.settings import ServerSettings

# Load environment variables
load_dotenv()

# stdout carries the MCP protocol, so everything human-facing goes to stderr
console = Console(stderr=True)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Setup rich logging, plus an optional log file."""
    handlers: list[logging.Handler] = [
        RichHandler(console=console, rich_tracebacks=True, show_path=False)
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
    # Reduce noise from the protocol layer
    logging.getLogger("mcp").setLevel(logging.WARNING)


def load_settings(config_file: Optional[str]) -> ServerSettings:
    if config_file:
        return ServerSettings.from_file(config_file)
    return ServerSettings()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML or JSON settings file (default: environment variables)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool):
    """Local Search MCP - sandboxed filesystem tools for LLMs."""
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot load settings: {e}")

    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)
    ctx.obj = settings


def _build_tools(settings: ServerSettings) -> FileSystemTools:
    try:
        return FileSystemTools(settings.to_access_config())
    except ValueError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.pass_obj
def serve(settings: ServerSettings):
    """
    Run the MCP server on stdio.

    Example client configuration:

        {"command": "local-search-mcp", "args": ["serve"]}
    """
    from local_search_mcp.server import LocalSearchServer

    server = LocalSearchServer(settings, _build_tools(settings))
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Server stopped")


@cli.command()
@click.pass_obj
def config(settings: ServerSettings):
    """Show the effective access configuration."""
    tools = _build_tools(settings)
    summary = tools.get_summary()

    table = Table(title=f"{settings.server_name} {settings.server_version}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Allowed directories", "\n".join(summary["allowed_directories"]))
    table.add_row("Output directory", str(summary["default_output_directory"]))
    table.add_row("Max file size", f"{summary['max_file_size_mb']:.1f} MB")
    extensions = summary["allowed_extensions"]
    table.add_row("Allowed extensions", ", ".join(extensions) if extensions else "all")
    table.add_row("Follow symlinks", str(summary["follow_symlinks"]))
    console.print(table)


@cli.command(name="tools")
@click.option("--json", "as_json", is_flag=True, help="Print the raw function schemas")
@click.pass_obj
def list_tools(settings: ServerSettings, as_json: bool):
    """List the available tools."""
    tools = _build_tools(settings)
    schemas = tools.get_tool_schemas()

    if as_json:
        click.echo(json.dumps(schemas, indent=2))
        return

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    table.add_column("Description")
    for schema in schemas:
        function = schema["function"]
        required = set(function["parameters"].get("required", []))
        arguments = ", ".join(
            name if name in required else f"[{name}]"
            for name in function["parameters"].get("properties", {})
        )
        table.add_row(function["name"], arguments, function["description"])
    console.print(table)


@cli.command()
@click.argument("tool_name")
@click.argument("arguments", required=False, default="{}")
@click.option("--json", "as_json", is_flag=True, help="Print the structured result")
@click.pass_obj
def call(settings: ServerSettings, tool_name: str, arguments: str, as_json: bool):
    """
    Call a single tool.

    ARGUMENTS is a JSON object, for example:

        local-search-mcp call read_file '{"path": "Documents/notes.md"}'
    """
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="ARGUMENTS")
    if not isinstance(parsed, dict):
        raise click.BadParameter("Arguments must be a JSON object", param_hint="ARGUMENTS")

    tools = _build_tools(settings)
    try:
        result = asyncio.run(tools.execute_tool(tool_name, parsed))
    except ValueError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
    elif result["success"]:
        click.echo(result["text"])
    else:
        console.print(
            Panel(result["error"], title=f"[red]{result['error_type']}[/red]", border_style="red")
        )

    if not result["success"]:
        sys.exit(1)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
