"""Dependency access for the discovery MCP tools."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import Context, FastMCP

from tool_discovery.config import DiscoveryConfig
from tool_discovery.discovery.index import ToolDiscoveryIndex

INDEX_KEY = "discovery_index"


@asynccontextmanager
async def discovery_lifespan(app: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Create the server's index and warm its registry in the background."""
    index = ToolDiscoveryIndex(DiscoveryConfig.from_env())
    index.ensure_registry(wait=False)
    try:
        yield {INDEX_KEY: index}
    finally:
        index.close()


async def get_discovery_index(ctx: Context) -> ToolDiscoveryIndex:
    """Return the ToolDiscoveryIndex owned by the server lifespan.

    Raises:
        ValueError: If the server was started without the discovery lifespan.
    """
    lifespan_context = ctx.request_context.lifespan_context
    index = lifespan_context.get(INDEX_KEY) if isinstance(lifespan_context, dict) else None
    if not isinstance(index, ToolDiscoveryIndex):
        raise ValueError("Tool discovery index is not configured for this server")
    return index
