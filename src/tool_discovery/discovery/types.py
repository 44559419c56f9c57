"""Data types for tool discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

LOCAL_BINARY = "local-binary"
REMOTE_CAPABILITY = "remote-capability"
TOOL_TYPES = (LOCAL_BINARY, REMOTE_CAPABILITY)

NOT_INSTALLED = "not installed"
UNKNOWN_VERSION = "unknown"

CATEGORIES = (
    "development",
    "data-processing",
    "network",
    "system",
    "archive",
    "container",
    "cloud",
    "documentation",
    "remote",
    "other",
)

SERVER_CONNECTED = "connected"
SERVER_DISCONNECTED = "disconnected"
SERVER_ERROR = "error"

MATCH_MODES = ("error", "task", "text", "category", "name")


@dataclass(frozen=True)
class ToolEntry:
    """One discoverable capability, a local executable or a remote tool."""

    name: str
    type: str  # "local-binary", "remote-capability"
    description: str
    category: str
    available: bool
    location: str  # resolved path, owning server, or "not installed"
    version: str = UNKNOWN_VERSION

    @property
    def key(self) -> str:
        """Identifier unique within a registry."""
        if self.type == REMOTE_CAPABILITY:
            return f"{self.location}/{self.name}"
        return self.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "category": self.category,
            "available": self.available,
            "location": self.location,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolEntry:
        # Unknown keys are ignored so newer caches stay readable.
        return cls(
            name=str(data["name"]),
            type=str(data.get("type", LOCAL_BINARY)),
            description=str(data.get("description", "")),
            category=str(data.get("category", "other")),
            available=bool(data.get("available", False)),
            location=str(data.get("location", NOT_INSTALLED)),
            version=str(data.get("version", UNKNOWN_VERSION)),
        )


@dataclass(frozen=True)
class ServerCapability:
    """A capability exposed by an MCP server."""

    name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServerCapability:
        return cls(name=str(data["name"]), description=str(data.get("description", "")))


@dataclass(frozen=True)
class ServerEntry:
    """An MCP server declared in a configuration file."""

    name: str
    description: str = ""
    status: str = SERVER_DISCONNECTED  # "connected", "disconnected", "error"
    capabilities: tuple[ServerCapability, ...] = ()
    source: str = ""  # config file the server was declared in

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "capabilities": [c.to_dict() for c in self.capabilities],
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServerEntry:
        return cls(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            status=str(data.get("status", SERVER_DISCONNECTED)),
            capabilities=tuple(
                ServerCapability.from_dict(c) for c in data.get("capabilities", [])
            ),
            source=str(data.get("source", "")),
        )


@dataclass(frozen=True)
class Registry:
    """Timestamped snapshot of every known tool entry.

    A registry is never mutated after construction; a rebuild produces a
    new instance that replaces the old one wholesale.
    """

    built_at: datetime
    entries: tuple[ToolEntry, ...]
    servers: tuple[ServerEntry, ...] = ()
    complete: bool = True
    fallback: bool = False

    def find(self, name: str) -> list[ToolEntry]:
        """Return all entries whose name equals ``name`` (case-insensitive)."""
        wanted = name.lower()
        return [e for e in self.entries if e.name.lower() == wanted]

    def names(self) -> list[str]:
        """Return the distinct entry names in registry order."""
        return list(dict.fromkeys(e.name for e in self.entries))


@dataclass(frozen=True)
class MatchRule:
    """A keyword pattern and the tools recommended for it, in order."""

    pattern: str
    recommended: tuple[str, ...]


@dataclass(frozen=True)
class Query:
    """A matcher query: how to interpret ``value`` and the value itself."""

    mode: str  # "error", "task", "text", "category", "name"
    value: str

    def __post_init__(self) -> None:
        if self.mode not in MATCH_MODES:
            raise ValueError(
                f"Unknown match mode {self.mode!r}, expected one of {MATCH_MODES}"
            )


@dataclass(frozen=True)
class ToolDetail:
    """Expanded information about a single tool."""

    entry: ToolEntry
    examples: tuple[str, ...] = ()
    related: tuple[ToolEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = self.entry.to_dict()
        data["examples"] = list(self.examples)
        data["related"] = [e.name for e in self.related]
        return data


@dataclass
class ProjectContext:
    """The kind of project found at session start and its confirmed tools."""

    project_type: str
    project_root: str
    recommended_tools: list[str] = field(default_factory=list)
    session_id: str = "unknown"
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "project_type": self.project_type,
            "project_root": self.project_root,
            "session_id": self.session_id,
            "recommended_tools": list(self.recommended_tools),
        }
