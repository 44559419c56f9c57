"""Discovery of MCP servers declared in editor and agent config files."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from fastmcp import Client

from .types import (
    SERVER_CONNECTED,
    SERVER_DISCONNECTED,
    SERVER_ERROR,
    ServerCapability,
    ServerEntry,
)

logger = logging.getLogger("tool-discovery.servers")

# Config documents declare servers under either key; "mcpServers" is read first.
SERVER_KEYS: tuple[str, ...] = ("mcpServers", "servers")

# Keys we read ourselves and do not hand to the MCP client.
_LOCAL_KEYS = {"description"}


def read_server_configs(paths: Iterable[Path]) -> list[tuple[str, dict[str, Any], str]]:
    """Collect server declarations from candidate config files.

    Files that are missing are skipped silently; files that fail to parse
    are logged and skipped. A server name declared in more than one file
    keeps its first declaration.

    Args:
        paths: Candidate config files, in lookup order

    Returns:
        List of (server name, server config, source path), ordered by file
        then by key order within the file.
    """
    declared: list[tuple[str, dict[str, Any], str]] = []
    seen: set[str] = set()

    for path in paths:
        if not path.is_file():
            continue
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load MCP config from {path}: {e}")
            continue
        if not isinstance(document, dict):
            logger.warning(f"Ignoring MCP config {path}: top level is not an object")
            continue

        for key in SERVER_KEYS:
            servers = document.get(key)
            if not isinstance(servers, dict):
                continue
            for name, server_config in servers.items():
                if name in seen:
                    logger.debug(f"Server {name} already declared, skipping {path}")
                    continue
                if not isinstance(server_config, dict):
                    logger.warning(f"Ignoring server {name} in {path}: not an object")
                    continue
                seen.add(name)
                declared.append((name, server_config, str(path)))

    return declared


async def list_server_capabilities(
    name: str, server_config: dict[str, Any], timeout: float
) -> tuple[ServerCapability, ...]:
    """Connect to one MCP server and list the tools it exposes.

    Raises whatever the connection raises; callers decide how to degrade.
    """
    transport_config = {k: v for k, v in server_config.items() if k not in _LOCAL_KEYS}
    client = Client({"mcpServers": {name: transport_config}}, timeout=timeout)

    async def _list() -> list[Any]:
        async with client:
            return await client.list_tools()

    tools = await asyncio.wait_for(_list(), timeout=timeout)
    return tuple(
        ServerCapability(name=tool.name, description=tool.description or "")
        for tool in tools
    )


async def _introspect(
    name: str,
    server_config: dict[str, Any],
    source: str,
    timeout: float,
) -> ServerEntry:
    description = str(server_config.get("description") or "")
    try:
        capabilities = await list_server_capabilities(name, server_config, timeout)
    except Exception as e:
        logger.warning(f"Failed to connect to MCP server {name}: {e}")
        return ServerEntry(
            name=name, description=description, status=SERVER_ERROR, source=source
        )

    logger.debug(f"MCP server {name} exposes {len(capabilities)} tools")
    return ServerEntry(
        name=name,
        description=description,
        status=SERVER_CONNECTED,
        capabilities=capabilities,
        source=source,
    )


async def discover_servers_async(
    paths: Iterable[Path],
    timeout: float = 10.0,
    introspect: bool = True,  # noqa: FBT001, FBT002
) -> list[ServerEntry]:
    """Discover configured MCP servers and, optionally, their capabilities.

    Each server is introspected independently; one unreachable server is
    recorded with ``status="error"`` and does not affect the others.

    Args:
        paths: Candidate config files, in lookup order
        timeout: Seconds allowed for each server
        introspect: Connect to servers to enumerate capabilities

    Returns:
        Server entries in declaration order.
    """
    declared = read_server_configs(paths)
    if not introspect:
        return [
            ServerEntry(
                name=name,
                description=str(server_config.get("description") or ""),
                status=SERVER_DISCONNECTED,
                source=source,
            )
            for name, server_config, source in declared
        ]

    return list(
        await asyncio.gather(
            *(
                _introspect(name, server_config, source, timeout)
                for name, server_config, source in declared
            )
        )
    )


def discover_servers(
    paths: Iterable[Path],
    timeout: float = 10.0,
    introspect: bool = True,  # noqa: FBT001, FBT002
) -> list[ServerEntry]:
    """Synchronous wrapper around :func:`discover_servers_async`."""
    return asyncio.run(discover_servers_async(paths, timeout, introspect))
