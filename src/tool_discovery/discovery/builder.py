"""Registry construction from local probes and MCP server discovery."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..exceptions import RegistryBuildError
from .cache import registry_sort_key
from .metadata import FALLBACK_TOOLS, SEED_TOOLS
from .prober import probe, unavailable_entry
from .servers import discover_servers
from .types import (
    REMOTE_CAPABILITY,
    SERVER_CONNECTED,
    Registry,
    ServerEntry,
    ToolEntry,
)

if TYPE_CHECKING:
    from ..config import DiscoveryConfig

logger = logging.getLogger("tool-discovery.builder")


def remote_entries(servers: Iterable[ServerEntry]) -> list[ToolEntry]:
    """Turn the capabilities of connected servers into tool entries."""
    entries: list[ToolEntry] = []
    for server in servers:
        if server.status != SERVER_CONNECTED:
            continue
        for capability in server.capabilities:
            entries.append(
                ToolEntry(
                    name=capability.name,
                    type=REMOTE_CAPABILITY,
                    description=capability.description
                    or f"{capability.name} tool from {server.name}",
                    category="remote",
                    available=True,
                    location=server.name,
                )
            )
    return entries


def assemble_registry(
    entries: Iterable[ToolEntry],
    servers: Iterable[ServerEntry] = (),
    complete: bool = True,  # noqa: FBT001, FBT002
    fallback: bool = False,  # noqa: FBT001, FBT002
    built_at: datetime | None = None,
) -> Registry:
    """Deduplicate by key, sort case-insensitively and freeze."""
    unique: dict[str, ToolEntry] = {}
    for entry in entries:
        unique.setdefault(entry.key, entry)
    return Registry(
        built_at=built_at or datetime.now(timezone.utc),
        entries=tuple(sorted(unique.values(), key=registry_sort_key)),
        servers=tuple(servers),
        complete=complete,
        fallback=fallback,
    )


def fallback_registry() -> Registry:
    """Minimal registry used when no build could complete."""
    return assemble_registry(
        (unavailable_entry(name) for name in FALLBACK_TOOLS),
        complete=False,
        fallback=True,
    )


def build_registry(config: DiscoveryConfig) -> Registry:
    """Probe the seed tools and discover MCP servers within a time budget.

    Probes run concurrently on a bounded worker pool. When the overall
    budget expires, finished probes are kept, unfinished ones are recorded
    as unavailable and the registry is marked incomplete.

    Args:
        config: Discovery settings (seed tools, timeouts, server configs)

    Returns:
        The newly built registry.

    Raises:
        RegistryBuildError: If no probe finished and no server was found.
            Choosing between the fallback registry and a hard failure is
            left to the caller.
    """
    started = time.monotonic()
    seed_tools = SEED_TOOLS if config.seed_tools is None else config.seed_tools
    seed = list(dict.fromkeys(seed_tools))
    logger.info(f"Building tool registry ({len(seed)} tools)...")

    executor = ThreadPoolExecutor(
        max_workers=max(1, config.max_workers), thread_name_prefix="tool-probe"
    )
    try:
        probe_futures: dict[Future[ToolEntry], str] = {
            executor.submit(probe, name, config.probe_timeout): name for name in seed
        }
        server_future: Future[list[ServerEntry]] = executor.submit(
            discover_servers,
            config.server_config_paths,
            config.server_timeout,
            config.introspect_servers,
        )
        done, not_done = wait(
            [*probe_futures, server_future], timeout=config.build_timeout
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    entries: list[ToolEntry] = []
    finished = 0
    for future, name in probe_futures.items():
        if future in done and future.exception() is None:
            entries.append(future.result())
            finished += 1
        else:
            if future in done:
                logger.warning(f"Probe for {name} failed: {future.exception()}")
            entries.append(unavailable_entry(name))

    servers: list[ServerEntry] = []
    if server_future in done:
        if server_future.exception() is None:
            servers = server_future.result()
        else:
            logger.warning(f"MCP server discovery failed: {server_future.exception()}")

    if not_done:
        logger.warning(
            f"Tool registry build exceeded {config.build_timeout}s; "
            f"{len(not_done)} tasks abandoned"
        )

    if finished == 0 and not servers:
        raise RegistryBuildError(
            f"No tool probes completed within {config.build_timeout}s"
        )

    registry = assemble_registry(
        [*entries, *remote_entries(servers)],
        servers=servers,
        complete=not not_done,
    )
    elapsed = time.monotonic() - started
    available = sum(1 for e in registry.entries if e.available)
    logger.info(
        f"Tool registry built with {len(registry.entries)} entries "
        f"({available} available, {len(servers)} servers) in {elapsed:.1f}s"
    )
    return registry
