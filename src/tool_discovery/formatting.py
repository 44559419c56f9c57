"""Text renderings of registry results for the command line."""

import json
from collections.abc import Sequence

from .discovery.types import REMOTE_CAPABILITY, ToolDetail, ToolEntry

OUTPUT_FORMATS = ("table", "list", "json")

_TYPE_LABELS = {REMOTE_CAPABILITY: "MCP"}


def format_entries(entries: Sequence[ToolEntry], fmt: str = "table") -> str:
    """Render entries as a table, a plain name list, or JSON."""
    if fmt == "json":
        return json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)
    if fmt == "list":
        return "\n".join(e.name for e in entries)

    width = max((len(e.name) for e in entries), default=0)
    width = max(width, 20)
    lines = []
    for entry in entries:
        status = "✓" if entry.available else "✗"
        label = _TYPE_LABELS.get(entry.type, "SYSTEM")
        lines.append(
            f"  {status} {label:<6} {entry.name:<{width}} {entry.description}"
        )
    return "\n".join(lines)


def format_detail(detail: ToolDetail, fmt: str = "table") -> str:
    """Render a single tool's detail."""
    if fmt == "json":
        return json.dumps(detail.to_dict(), indent=2, ensure_ascii=False)

    entry = detail.entry
    lines = [
        f"{entry.name}: {entry.description}",
        f"  Type:      {entry.type}",
        f"  Category:  {entry.category}",
        f"  Available: {'yes' if entry.available else 'no'}",
        f"  Location:  {entry.location}",
        f"  Version:   {entry.version}",
    ]
    if detail.examples:
        lines.append("  Examples:")
        lines.extend(f"    {example}" for example in detail.examples)
    if detail.related:
        lines.append(
            "  Related:   " + ", ".join(related.name for related in detail.related)
        )
    return "\n".join(lines)
