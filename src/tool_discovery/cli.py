"""Command line interface for tool discovery."""

import dataclasses
import logging
import os
import subprocess
import sys
from pathlib import Path

import click

from .config import DiscoveryConfig
from .discovery.cache import is_fresh, load_registry
from .discovery.context import detect_project_context, write_project_context
from .discovery.index import ToolDiscoveryIndex
from .discovery.matching import suggest_names
from .discovery.metadata import resolve_category
from .discovery.types import Query
from .exceptions import RegistryUnavailableError
from .formatting import OUTPUT_FORMATS, format_detail, format_entries
from .utils.logging import setup_logging, trim_log_file

logger = logging.getLogger("tool-discovery.cli")

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _log_level(verbose: int) -> int:
    return _LOG_LEVELS.get(verbose, logging.DEBUG)


def spawn_background_refresh(config: DiscoveryConfig) -> subprocess.Popen:
    """Start a detached process that rebuilds the registry cache."""
    return subprocess.Popen(
        [
            sys.executable,
            "-m",
            "tool_discovery",
            "--cache-dir",
            str(config.cache_dir),
            "refresh",
            "--quiet",
        ],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


@click.group()
@click.version_option(package_name="cli-tool-discovery")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv)")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Registry cache directory (default: ~/.claude/cli-tool-discovery)",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, cache_dir: Path | None) -> None:
    """Find the right command line tool for an error or task."""
    setup_logging(_log_level(verbose))
    config = DiscoveryConfig.from_env()
    if cache_dir is not None:
        config.cache_dir = cache_dir
    ctx.obj = {"index": ToolDiscoveryIndex(config), "verbose": verbose}


@main.command()
@click.argument("query", required=False)
@click.option("--error", "error_text", help="Error message to find tools for")
@click.option("--task", "task_text", help="Task description to find tools for")
@click.option("--category", help="Category name or unique prefix")
@click.option("--name", "tool_name", help="Exact tool name")
@click.option("--list", "list_all", is_flag=True, help="List every known tool")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum results")
@click.option("--available-only", is_flag=True, help="Only show installed tools")
@click.option(
    "--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default="table",
    show_default=True,
)
@click.pass_context
def discover(
    ctx: click.Context,
    query: str | None,
    error_text: str | None,
    task_text: str | None,
    category: str | None,
    tool_name: str | None,
    list_all: bool,
    limit: int | None,
    available_only: bool,
    fmt: str,
) -> None:
    """Discover tools for an error, a task or free text.

    Examples:
        cli-tool-discovery discover --error "permission denied"
        cli-tool-discovery discover --task "debug network issues"
        cli-tool-discovery discover json
    """
    selected = [
        (mode, value)
        for mode, value in (
            ("error", error_text),
            ("task", task_text),
            ("category", resolve_category(category) if category else None),
            ("name", tool_name),
            ("text", query),
        )
        if value is not None
    ]
    if list_all:
        selected.append(("text", ""))
    if len(selected) > 1:
        raise click.UsageError(
            "Use only one of QUERY, --error, --task, --category, --name, --list"
        )
    if not selected:
        click.echo(ctx.get_help())
        return

    mode, value = selected[0]
    index: ToolDiscoveryIndex = ctx.obj["index"]
    try:
        entries = index.discover(
            Query(mode, value), limit=limit, available_only=available_only
        )
    except RegistryUnavailableError as e:
        raise click.ClickException(str(e)) from e

    if not entries and fmt != "json":
        click.echo(f"No tools found for {mode} '{value}'")
        return
    click.echo(format_entries(entries, fmt))


@main.command("list")
@click.option("--category", help="Category name or unique prefix")
@click.option("--available-only", is_flag=True, help="Only show installed tools")
@click.option(
    "--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default="table",
    show_default=True,
)
@click.pass_obj
def list_command(
    obj: dict, category: str | None, available_only: bool, fmt: str
) -> None:
    """List known tools."""
    index: ToolDiscoveryIndex = obj["index"]
    try:
        entries = index.list_tools(
            category=resolve_category(category) if category else None,
            available_only=available_only,
        )
    except RegistryUnavailableError as e:
        raise click.ClickException(str(e)) from e

    if not entries and fmt != "json":
        click.echo("No tools found")
        return
    if fmt == "table":
        click.echo("Available Tools:")
    click.echo(format_entries(entries, fmt))


@main.command()
@click.argument("name")
@click.option("--examples", is_flag=True, help="Show usage examples")
@click.option("--related", is_flag=True, help="Show tools from the same category")
@click.option("--all", "show_all", is_flag=True, help="Show everything")
@click.option(
    "--format", "fmt", type=click.Choice(["table", "json"]), default="table",
    show_default=True,
)
@click.pass_obj
def info(
    obj: dict, name: str, examples: bool, related: bool, show_all: bool, fmt: str
) -> None:
    """Show detail for one tool.

    To search by text use `discover QUERY`; to list tools use `list`.
    """
    index: ToolDiscoveryIndex = obj["index"]
    try:
        detail = index.detail(name)
    except RegistryUnavailableError as e:
        raise click.ClickException(str(e)) from e

    if detail is None:
        click.echo(f"Tool '{name}' not found")
        registry = index.registry
        suggestions = suggest_names(name, registry) if registry else []
        if suggestions:
            click.echo(f"Did you mean: {', '.join(suggestions)}?")
        return

    if not (examples or show_all):
        detail = dataclasses.replace(detail, examples=())
    if not (related or show_all):
        detail = dataclasses.replace(detail, related=())
    click.echo(format_detail(detail, fmt))


@main.command()
@click.option("--quiet", is_flag=True, help="Do not print a summary")
@click.pass_obj
def refresh(obj: dict, quiet: bool) -> None:
    """Rebuild the tool registry cache."""
    index: ToolDiscoveryIndex = obj["index"]
    try:
        registry = index.refresh()
    except RegistryUnavailableError as e:
        raise click.ClickException(str(e)) from e
    if quiet:
        return
    available = sum(1 for e in registry.entries if e.available)
    if registry.fallback:
        status = " (fallback, build failed)"
    elif not registry.complete:
        status = " (incomplete)"
    else:
        status = ""
    click.echo(
        f"Tool registry refreshed: {len(registry.entries)} tools, "
        f"{available} available, {len(registry.servers)} MCP servers{status}"
    )


@main.command("session-start")
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project directory to inspect",
)
@click.option(
    "--wait", is_flag=True, help="Build the registry in this process before returning"
)
@click.pass_obj
def session_start(obj: dict, project_root: Path, wait: bool) -> None:
    """Session start hook: detect the project and warm the registry."""
    index: ToolDiscoveryIndex = obj["index"]
    config = index.config

    trim_log_file(config.session_log_path)
    setup_logging(
        min(_log_level(obj["verbose"]), logging.INFO),
        log_file=config.session_log_path,
        console=False,
    )
    logger.info(
        f"Session-start hook triggered (Session: {os.getenv('SESSION_ID', 'unknown')})"
    )

    context = detect_project_context(project_root.resolve())
    try:
        write_project_context(context, config.project_context_path)
    except OSError as e:
        logger.warning(f"Failed to write project context: {e}")

    cached = load_registry(config.cache_path)
    if cached is not None and is_fresh(cached, config.cache_ttl):
        registry_status = "Tool registry is up to date"
    elif wait:
        try:
            registry = index.ensure_registry(wait=True)
        except RegistryUnavailableError as e:
            logger.warning(f"Tool registry unavailable: {e}")
            registry_status = "Tool registry unavailable"
        else:
            registry_status = (
                "Tool registry built"
                if not registry.fallback
                else "Tool registry build failed, using fallback"
            )
    else:
        try:
            spawn_background_refresh(config)
            registry_status = "Tool registry building in background"
        except OSError as e:
            logger.warning(f"Failed to start background registry build: {e}")
            registry_status = "Tool registry build could not be started"

    click.echo(f"CLI Tool Discovery: Initialized for {context.project_type} project")
    click.echo(f"CLI Tool Discovery: {registry_status}")
    logger.info("Session-start hook completed")


@main.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    show_default=True,
)
@click.pass_obj
def serve(obj: dict, transport: str) -> None:
    """Run the tool discovery MCP server."""
    from .servers import discovery_mcp

    index: ToolDiscoveryIndex = obj["index"]
    os.environ["TOOL_DISCOVERY_CACHE_DIR"] = str(index.config.cache_dir)
    discovery_mcp.run(transport=transport)
