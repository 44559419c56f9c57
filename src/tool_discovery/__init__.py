"""Discover command line tools and MCP server capabilities."""

__version__ = "0.1.0"
