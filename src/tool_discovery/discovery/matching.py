"""Matching queries against the tool registry."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from thefuzz import process

from .metadata import ERROR_RULES, TASK_RULES

if TYPE_CHECKING:
    from .types import MatchRule, Query, Registry, ToolEntry

RULES_BY_MODE: dict[str, tuple[MatchRule, ...]] = {
    "error": ERROR_RULES,
    "task": TASK_RULES,
}

SUGGESTION_CUTOFF = 60


def _normalize_text(text: str) -> str:
    """Normalize text for comparison - lowercase and strip."""
    return text.lower().strip()


def rule_matches(pattern: str, value: str) -> bool:
    """Symmetric, case-insensitive substring containment.

    "permission denied: /etc/x" matches the rule "permission denied", and
    the abbreviated "debug" matches the rule "debug network".
    """
    pattern = _normalize_text(pattern)
    value = _normalize_text(value)
    return pattern in value or value in pattern


def recommend(value: str, rules: Iterable[MatchRule]) -> list[str]:
    """Collect recommended tool names for every rule matching ``value``.

    Recommendations keep rule-definition order and each name appears once,
    at its first position.
    """
    names: list[str] = []
    for rule in rules:
        if rule_matches(rule.pattern, value):
            names.extend(rule.recommended)
    return list(dict.fromkeys(names))


def _field_contains(entry: ToolEntry, needle: str) -> bool:
    return (
        needle in entry.name.lower()
        or needle in entry.description.lower()
        or needle in entry.category.lower()
    )


def match(query: Query, registry: Registry) -> list[ToolEntry]:
    """Return registry entries relevant to a query, most relevant first.

    - ``error``/``task``: rule recommendations resolved against the
      registry; names the registry does not know are dropped.
    - ``text``: substring match on name, description and category. An
      empty value matches every entry.
    - ``category``/``name``: exact, case-insensitive field match.

    Entries of equal relevance keep registry order (name ascending). No
    match yields an empty list.
    """
    if query.mode in RULES_BY_MODE:
        results: list[ToolEntry] = []
        for name in recommend(query.value, RULES_BY_MODE[query.mode]):
            results.extend(registry.find(name))
        return results

    needle = _normalize_text(query.value)
    if query.mode == "text":
        return [e for e in registry.entries if _field_contains(e, needle)]
    if query.mode == "category":
        return [e for e in registry.entries if e.category.lower() == needle]
    return [e for e in registry.entries if e.name.lower() == needle]


def related_tools(entry: ToolEntry, registry: Registry, limit: int = 5) -> list[ToolEntry]:
    """Other registry entries in the same category, in registry order."""
    related = [
        e
        for e in registry.entries
        if e.category == entry.category and e.key != entry.key
    ]
    return related[:limit]


def suggest_names(name: str, registry: Registry, limit: int = 3) -> list[str]:
    """Suggest registry names close to ``name`` for a failed lookup."""
    choices = registry.names()
    if not name.strip() or not choices:
        return []
    suggestions = process.extractBests(
        _normalize_text(name),
        choices,
        score_cutoff=SUGGESTION_CUTOFF,
        limit=limit,
    )
    return [choice for choice, _score in suggestions]
