"""MCP server exposing tool discovery."""

from .main import discovery_mcp

__all__ = ["discovery_mcp"]
