"""Unit tests for registry building."""

import threading
import time
from unittest.mock import patch

import pytest

from tests.conftest import make_entry
from tool_discovery.discovery.builder import (
    build_registry,
    fallback_registry,
    remote_entries,
)
from tool_discovery.discovery.metadata import FALLBACK_TOOLS
from tool_discovery.discovery.types import (
    NOT_INSTALLED,
    REMOTE_CAPABILITY,
    ServerCapability,
    ServerEntry,
)
from tool_discovery.exceptions import RegistryBuildError


def _fake_probe(name, timeout=None):
    return make_entry(name, available=name != "missing")


class TestBuildRegistry:
    """Tests for build_registry."""

    def test_entries_sorted_case_insensitively(self, config):
        """Test that entries are ordered by name regardless of case."""
        config.seed_tools = ("zip", "Alpha", "beta", "missing")
        with patch("tool_discovery.discovery.builder.probe", _fake_probe):
            registry = build_registry(config)
        assert [e.name for e in registry.entries] == ["Alpha", "beta", "missing", "zip"]
        assert registry.complete is True
        assert registry.fallback is False

    def test_duplicate_seed_names_are_probed_once(self, config):
        """Test that a repeated seed name is probed a single time."""
        config.seed_tools = ("jq", "jq", "git")
        calls = []

        def counting_probe(name, timeout=None):
            calls.append(name)
            return make_entry(name)

        with patch("tool_discovery.discovery.builder.probe", counting_probe):
            registry = build_registry(config)
        assert sorted(calls) == ["git", "jq"]
        assert len(registry.entries) == 2

    def test_idempotent_up_to_version_and_timestamp(self, config):
        """Test that two builds in a row produce the same entries."""
        config.seed_tools = ("git", "jq", "definitely-not-a-real-tool-12345")
        first = build_registry(config)
        second = build_registry(config)

        def strip(registry):
            return [
                (e.name, e.type, e.available, e.location, e.category)
                for e in registry.entries
            ]

        assert strip(first) == strip(second)

    def test_missing_tools_are_recorded_as_unavailable(self, config):
        """Test that a tool missing from PATH is kept as unavailable."""
        config.seed_tools = ("definitely-not-a-real-tool-12345", "git")
        registry = build_registry(config)
        missing = registry.find("definitely-not-a-real-tool-12345")[0]
        assert missing.available is False
        assert missing.location == NOT_INSTALLED

    def test_timeout_keeps_partial_results(self, config):
        """Test that finished probes survive when the budget runs out."""
        config.seed_tools = ("fast", "slow")
        config.build_timeout = 0.2
        release = threading.Event()

        def slow_probe(name, timeout=None):
            if name == "slow":
                release.wait(5)
            return make_entry(name)

        try:
            with patch("tool_discovery.discovery.builder.probe", slow_probe):
                started = time.monotonic()
                registry = build_registry(config)
                elapsed = time.monotonic() - started
        finally:
            release.set()

        assert elapsed < 2
        assert registry.complete is False
        assert registry.fallback is False
        fast = registry.find("fast")[0]
        slow = registry.find("slow")[0]
        assert fast.available is True
        assert slow.available is False
        assert slow.location == NOT_INSTALLED

    def test_nothing_finished_raises(self, config):
        """Test that a build finishing nothing reports failure to its caller."""
        config.seed_tools = ("slow",)
        config.build_timeout = 0.1
        release = threading.Event()

        def stalled_lookup(name, timeout=None):
            release.wait(5)
            return make_entry(name)

        try:
            with (
                patch("tool_discovery.discovery.builder.probe", stalled_lookup),
                pytest.raises(RegistryBuildError, match="No tool probes completed"),
            ):
                build_registry(config)
        finally:
            release.set()

    def test_crashing_probe_does_not_fail_build(self, config):
        """Test that an unexpected probe error marks only that tool."""
        config.seed_tools = ("ok", "boom")

        def flaky_probe(name, timeout=None):
            if name == "boom":
                raise RuntimeError("unexpected")
            return make_entry(name)

        with patch("tool_discovery.discovery.builder.probe", flaky_probe):
            registry = build_registry(config)
        assert registry.find("boom")[0].available is False
        assert registry.find("ok")[0].available is True

    def test_server_capabilities_become_entries(self, config):
        """Test that connected server capabilities are merged as entries."""
        servers = [
            ServerEntry(
                name="docs",
                status="connected",
                capabilities=(ServerCapability("jq", "Remote jq"),),
            ),
            ServerEntry(name="broken", status="error"),
        ]
        config.seed_tools = ("jq",)
        with (
            patch("tool_discovery.discovery.builder.probe", _fake_probe),
            patch(
                "tool_discovery.discovery.builder.discover_servers",
                return_value=servers,
            ),
        ):
            registry = build_registry(config)

        assert [(e.name, e.type) for e in registry.entries] == [
            ("jq", "local-binary"),
            ("jq", REMOTE_CAPABILITY),
        ]
        assert [s.name for s in registry.servers] == ["docs", "broken"]

    def test_server_discovery_failure_is_tolerated(self, config):
        """Test that a crash in server discovery leaves local entries intact."""
        with (
            patch("tool_discovery.discovery.builder.probe", _fake_probe),
            patch(
                "tool_discovery.discovery.builder.discover_servers",
                side_effect=RuntimeError("boom"),
            ),
        ):
            registry = build_registry(config)
        assert registry.servers == ()
        assert len(registry.entries) == 2


class TestRemoteEntries:
    """Tests for converting server capabilities."""

    def test_only_connected_servers_contribute(self):
        """Test that disconnected servers add no entries."""
        servers = [
            ServerEntry(
                name="a",
                status="connected",
                capabilities=(ServerCapability("one", ""),),
            ),
            ServerEntry(
                name="b",
                status="disconnected",
                capabilities=(ServerCapability("two", "x"),),
            ),
        ]
        entries = remote_entries(servers)
        assert [(e.name, e.location, e.category) for e in entries] == [
            ("one", "a", "remote")
        ]
        assert entries[0].description == "one tool from a"


class TestFallbackRegistry:
    """Tests for the minimal fallback registry."""

    def test_contents(self):
        """Test that the fallback lists the hardcoded tools as unavailable."""
        registry = fallback_registry()
        assert registry.fallback is True
        assert registry.complete is False
        assert {e.name for e in registry.entries} == set(FALLBACK_TOOLS)
        assert all(not e.available for e in registry.entries)
        assert all(e.location == NOT_INSTALLED for e in registry.entries)
