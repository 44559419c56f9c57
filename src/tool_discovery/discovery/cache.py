"""Registry cache file: encoding, atomic writes and tolerant reads."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from ..exceptions import CacheError
from .types import Registry, ServerEntry, ToolEntry

logger = logging.getLogger("tool-discovery.cache")


def registry_sort_key(entry: ToolEntry) -> tuple[str, str, str, str]:
    """Case-insensitive name order, then type and location for ties."""
    return (entry.name.lower(), entry.name, entry.type, entry.location)


def registry_to_dict(registry: Registry) -> dict[str, Any]:
    """Encode a registry as the cache document."""
    return {
        "timestamp": registry.built_at.isoformat(),
        "complete": registry.complete,
        "fallback": registry.fallback,
        "tools": {entry.key: entry.to_dict() for entry in registry.entries},
        "servers": {server.name: server.to_dict() for server in registry.servers},
    }


def registry_from_dict(data: Any) -> Registry:
    """Decode a cache document.

    Raises:
        CacheError: If the document does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise CacheError("Registry cache is not a JSON object")
    try:
        built_at = datetime.fromisoformat(data["timestamp"])
        tools = data.get("tools", {})
        servers = data.get("servers", {})
        if not isinstance(tools, dict) or not isinstance(servers, dict):
            raise CacheError("Registry cache tools/servers must be objects")
        entries = sorted(
            (ToolEntry.from_dict(value) for value in tools.values()),
            key=registry_sort_key,
        )
        server_entries = tuple(ServerEntry.from_dict(value) for value in servers.values())
    except CacheError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CacheError(f"Malformed registry cache: {e}") from e

    if built_at.tzinfo is None:
        built_at = built_at.replace(tzinfo=timezone.utc)

    return Registry(
        built_at=built_at,
        entries=tuple(entries),
        servers=server_entries,
        complete=bool(data.get("complete", True)),
        fallback=bool(data.get("fallback", False)),
    )


def write_json_atomic(path: Path, document: Any) -> None:
    """Write JSON so that readers never observe a partially written file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(document, handle, indent=2, ensure_ascii=False)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def save_registry(registry: Registry, path: Path) -> None:
    """Persist a registry, replacing any previous cache wholesale."""
    write_json_atomic(path, registry_to_dict(registry))
    logger.debug(f"Saved registry with {len(registry.entries)} entries to {path}")


def load_registry(path: Path) -> Registry | None:
    """Load a cached registry.

    A missing, empty, truncated or otherwise corrupt cache is reported as
    absent (``None``) rather than raised.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read tool registry {path}: {e}")
        return None

    try:
        return registry_from_dict(json.loads(raw))
    except (json.JSONDecodeError, CacheError) as e:
        logger.warning(f"Ignoring unreadable tool registry {path}: {e}")
        return None


def is_fresh(
    registry: Registry, ttl: float, now: datetime | None = None
) -> bool:
    """Return True if the registry was built less than ``ttl`` seconds ago.

    A fallback registry is never fresh, so it never stands in for a rebuild.
    """
    if registry.fallback:
        return False
    now = now or datetime.now(timezone.utc)
    age = now - registry.built_at
    return timedelta(0) <= age < timedelta(seconds=ttl)
