"""MCP tools exposing tool discovery to agents."""

import asyncio
import json
import logging
from typing import Annotated, Any, Literal

from fastmcp import Context, FastMCP
from pydantic import Field

from tool_discovery.discovery.matching import suggest_names
from tool_discovery.discovery.metadata import resolve_category
from tool_discovery.discovery.types import Query
from tool_discovery.exceptions import RegistryUnavailableError
from tool_discovery.servers.dependencies import discovery_lifespan, get_discovery_index

logger = logging.getLogger("tool-discovery.mcp")

discovery_mcp = FastMCP(
    name="Tool Discovery",
    instructions=(
        "Finds command line tools and MCP server capabilities for an error "
        "message or task. Call discover_tools first and get_tool_info only "
        "for the entries you want to inspect."
    ),
    lifespan=discovery_lifespan,
)


def _dumps(result: dict[str, Any]) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False)


def _summary(entry: Any) -> dict[str, Any]:
    # Cheap view: enough to choose a tool, not its full detail.
    return {
        "name": entry.name,
        "type": entry.type,
        "category": entry.category,
        "available": entry.available,
        "description": entry.description,
    }


@discovery_mcp.tool(tags={"discovery", "read"})
async def discover_tools(
    ctx: Context,
    query: Annotated[
        str,
        Field(description="Error message, task description or search text"),
    ],
    mode: Annotated[
        Literal["error", "task", "text", "category", "name"],
        Field(
            description=(
                "How to interpret the query: 'error' and 'task' use curated "
                "recommendations, 'text' searches names and descriptions"
            ),
            default="text",
        ),
    ] = "text",
    limit: Annotated[
        int,
        Field(description="Maximum number of tools to return", default=10, ge=1),
    ] = 10,
    available_only: Annotated[
        bool,
        Field(description="Only return installed tools", default=False),
    ] = False,
) -> str:
    """Find tools relevant to an error message or task.

    Args:
        ctx: The FastMCP context.
        query: Error message, task description or search text.
        mode: Query interpretation.
        limit: Maximum number of tools to return.
        available_only: Only return installed tools.

    Returns:
        JSON with the ranked tool summaries.
    """
    result: dict[str, Any] = {"query": query, "mode": mode, "tools": [], "errors": []}

    try:
        index = await get_discovery_index(ctx)
        value = resolve_category(query) if mode == "category" else query
        entries = await asyncio.to_thread(
            index.discover,
            Query(mode, value),
            limit=limit,
            available_only=available_only,
        )
    except (ValueError, RegistryUnavailableError) as e:
        logger.warning(f"discover_tools failed: {e}")
        result["errors"].append(str(e))
        return _dumps(result)

    result["tools"] = [_summary(e) for e in entries]
    result["count"] = len(entries)
    return _dumps(result)


@discovery_mcp.tool(tags={"discovery", "read"})
async def list_tools(
    ctx: Context,
    category: Annotated[
        str | None,
        Field(
            description="Category name or unique prefix (e.g. 'dev', 'network')",
            default=None,
        ),
    ] = None,
    available_only: Annotated[
        bool,
        Field(description="Only return installed tools", default=False),
    ] = False,
) -> str:
    """List known tools, optionally for one category.

    Args:
        ctx: The FastMCP context.
        category: Optional category filter.
        available_only: Only return installed tools.

    Returns:
        JSON with tool summaries and registry status.
    """
    result: dict[str, Any] = {"category": category, "tools": [], "errors": []}

    try:
        index = await get_discovery_index(ctx)
        entries = await asyncio.to_thread(
            index.list_tools,
            category=resolve_category(category) if category else None,
            available_only=available_only,
        )
    except (ValueError, RegistryUnavailableError) as e:
        logger.warning(f"list_tools failed: {e}")
        result["errors"].append(str(e))
        return _dumps(result)

    registry = index.registry
    result["tools"] = [_summary(e) for e in entries]
    result["count"] = len(entries)
    if registry is not None:
        result["built_at"] = registry.built_at.isoformat()
        result["complete"] = registry.complete
        result["fallback"] = registry.fallback
    return _dumps(result)


@discovery_mcp.tool(tags={"discovery", "read"})
async def get_tool_info(
    ctx: Context,
    name: Annotated[str, Field(description="Tool name, e.g. 'jq'")],
    include_examples: Annotated[
        bool,
        Field(description="Include curated usage examples", default=True),
    ] = True,
    include_related: Annotated[
        bool,
        Field(description="Include tools from the same category", default=False),
    ] = False,
) -> str:
    """Get full detail for one tool.

    Args:
        ctx: The FastMCP context.
        name: Tool name.
        include_examples: Include curated usage examples.
        include_related: Include tools from the same category.

    Returns:
        JSON with the tool detail, or found=false with suggestions.
    """
    result: dict[str, Any] = {"name": name, "found": False, "errors": []}

    try:
        index = await get_discovery_index(ctx)
        detail = await asyncio.to_thread(index.detail, name)
    except (ValueError, RegistryUnavailableError) as e:
        logger.warning(f"get_tool_info failed: {e}")
        result["errors"].append(str(e))
        return _dumps(result)

    if detail is None:
        registry = index.registry
        result["suggestions"] = suggest_names(name, registry) if registry else []
        return _dumps(result)

    result["found"] = True
    result["tool"] = detail.entry.to_dict()
    if include_examples:
        result["examples"] = list(detail.examples)
    if include_related:
        result["related"] = [_summary(e) for e in detail.related]
    return _dumps(result)


@discovery_mcp.tool(tags={"discovery", "write"})
async def refresh_tool_registry(ctx: Context) -> str:
    """Rebuild the tool registry now.

    Args:
        ctx: The FastMCP context.

    Returns:
        JSON summary of the rebuilt registry.
    """
    result: dict[str, Any] = {"refreshed": False, "errors": []}

    try:
        index = await get_discovery_index(ctx)
        registry = await asyncio.to_thread(index.refresh)
    except ValueError as e:
        result["errors"].append(str(e))
        return _dumps(result)
    except Exception as e:
        logger.error(f"Tool registry refresh failed: {e}")
        result["errors"].append(f"Refresh failed: {str(e)}")
        return _dumps(result)

    result["refreshed"] = True
    result["built_at"] = registry.built_at.isoformat()
    result["complete"] = registry.complete
    result["tool_count"] = len(registry.entries)
    result["available_count"] = sum(1 for e in registry.entries if e.available)
    result["server_count"] = len(registry.servers)
    return _dumps(result)
