"""Unit tests for curated tool metadata."""

import pytest

from tool_discovery.discovery.metadata import (
    ERROR_RULES,
    FALLBACK_TOOLS,
    SEED_TOOLS,
    TASK_RULES,
    TOOL_CATEGORIES,
    TOOL_DESCRIPTIONS,
    TOOL_EXAMPLES,
    categorize,
    describe,
    examples_for,
    resolve_category,
)
from tool_discovery.discovery.types import CATEGORIES


class TestCuratedTables:
    """Consistency checks across the curated tables."""

    def test_every_recommended_tool_is_seeded(self):
        """Test that every rule recommends only seeded tools."""
        for rule in [*ERROR_RULES, *TASK_RULES]:
            for name in rule.recommended:
                assert name in SEED_TOOLS, f"{name} from {rule.pattern!r} not seeded"

    def test_rule_patterns_are_lowercase(self):
        """Test that rule patterns are stored lowercased."""
        for rule in [*ERROR_RULES, *TASK_RULES]:
            assert rule.pattern == rule.pattern.lower()

    def test_seed_tools_are_unique(self):
        """Test that the seed list has no duplicates."""
        assert len(SEED_TOOLS) == len(set(SEED_TOOLS))

    def test_fallback_tools_are_seeded(self):
        """Test that the fallback tools are a subset of the seed list."""
        assert set(FALLBACK_TOOLS) <= set(SEED_TOOLS)

    def test_categories_are_known(self):
        """Test that every categorized tool uses a known category."""
        assert set(TOOL_CATEGORIES) <= set(CATEGORIES)

    def test_every_seed_tool_has_description(self):
        """Test that each seeded tool has a curated description."""
        for name in SEED_TOOLS:
            assert TOOL_DESCRIPTIONS.get(name), name

    def test_examples_only_for_seeded_tools(self):
        """Test that usage examples exist only for seeded tools."""
        assert set(TOOL_EXAMPLES) <= set(SEED_TOOLS)


class TestLookups:
    """Tests for description, category and example lookups."""

    def test_describe_known(self):
        """Test the curated description of a known tool."""
        assert describe("jq") == "JSON processor and formatter"

    def test_describe_unknown(self):
        """Test the generated description of an unknown tool."""
        assert describe("frobnicate") == "frobnicate command line tool"

    def test_categorize(self):
        """Test category lookup for known and unknown tools."""
        assert categorize("curl") == "network"
        assert categorize("frobnicate") == "other"

    def test_examples_for_returns_copy(self):
        """Test that callers cannot mutate the curated examples."""
        examples = examples_for("git")
        assert examples
        examples.append("git mutate")
        assert "git mutate" not in examples_for("git")

    def test_examples_for_unknown(self):
        """Test that an unknown tool has no examples."""
        assert examples_for("frobnicate") == []


class TestResolveCategory:
    """Tests for category name resolution."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("development", "development"),
            ("Network", "network"),
            ("dev", "development"),
            ("data", "data-processing"),
            ("  SYS ", "system"),
        ],
    )
    def test_resolves(self, value, expected):
        """Test exact, case-insensitive and prefix resolution."""
        assert resolve_category(value) == expected

    def test_ambiguous_prefix_is_not_resolved(self):
        """Test that a prefix shared by two categories is left alone."""
        # "c" starts both "container" and "cloud".
        assert resolve_category("c") == "c"

    def test_unknown_is_lowercased(self):
        """Test that an unknown category is only normalized."""
        assert resolve_category("Gaming") == "gaming"
