"""Tool discovery: probing, registry building, caching and matching."""

from .builder import build_registry, fallback_registry
from .index import ToolDiscoveryIndex
from .matching import match
from .prober import probe
from .servers import discover_servers
from .types import MatchRule, Query, Registry, ServerEntry, ToolDetail, ToolEntry

__all__ = [
    "ToolDiscoveryIndex",
    "build_registry",
    "discover_servers",
    "fallback_registry",
    "match",
    "probe",
    "MatchRule",
    "Query",
    "Registry",
    "ServerEntry",
    "ToolDetail",
    "ToolEntry",
]
