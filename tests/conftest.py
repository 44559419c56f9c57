"""Shared fixtures for tool discovery tests."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tool_discovery.config import DiscoveryConfig
from tool_discovery.discovery.builder import assemble_registry
from tool_discovery.discovery.types import (
    LOCAL_BINARY,
    NOT_INSTALLED,
    REMOTE_CAPABILITY,
    UNKNOWN_VERSION,
    Registry,
    ServerCapability,
    ServerEntry,
    ToolEntry,
)
from tool_discovery.utils.logging import LOGGER_NAME


def make_entry(
    name: str,
    category: str = "other",
    available: bool = True,
    description: str | None = None,
) -> ToolEntry:
    """Build a local-binary entry for tests."""
    return ToolEntry(
        name=name,
        type=LOCAL_BINARY,
        description=description or f"{name} command line tool",
        category=category,
        available=available,
        location=f"/usr/bin/{name}" if available else NOT_INSTALLED,
        version="1.0" if available else UNKNOWN_VERSION,
    )


@pytest.fixture(autouse=True)
def _clear_discovery_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in list(os.environ):
        if var.startswith("TOOL_DISCOVERY_"):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging so later tests see default propagation."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config(tmp_path: Path) -> DiscoveryConfig:
    """Config isolated to a temporary cache dir with no server configs."""
    return DiscoveryConfig(
        cache_dir=tmp_path / "cache",
        build_timeout=5.0,
        probe_timeout=1.0,
        server_timeout=1.0,
        max_workers=4,
        introspect_servers=False,
        server_config_paths=[],
        seed_tools=("git", "jq"),
    )


@pytest.fixture
def sample_registry() -> Registry:
    """A registry with a mix of available, missing and remote tools."""
    servers = [
        ServerEntry(
            name="docs",
            description="Documentation server",
            status="connected",
            capabilities=(ServerCapability("search_docs", "Search documentation"),),
            source="/home/user/.claude/mcp.json",
        )
    ]
    entries = [
        make_entry("chmod", "system", description="Change file permissions"),
        make_entry("curl", "network", description="Data transfer utility"),
        make_entry("jq", "data-processing", description="JSON processor and formatter"),
        make_entry("lsof", "system", description="List open files"),
        make_entry("netstat", "network", available=False),
        make_entry("ping", "network", description="Check host reachability"),
        make_entry("sudo", "system", description="Run a command as another user"),
        make_entry("traceroute", "network"),
        make_entry("git", "development", description="Version control system"),
        ToolEntry(
            name="search_docs",
            type=REMOTE_CAPABILITY,
            description="Search documentation",
            category="remote",
            available=True,
            location="docs",
        ),
    ]
    return assemble_registry(
        entries,
        servers=servers,
        built_at=datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
    )
