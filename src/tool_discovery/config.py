"""Configuration for tool discovery."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("tool-discovery.config")

REGISTRY_FILENAME = "tool-registry.json"
PROJECT_CONTEXT_FILENAME = "project-context.json"
SESSION_LOG_FILENAME = "session-start.log"


def default_cache_dir() -> Path:
    """Return the per-installation cache directory."""
    return Path.home() / ".claude" / "cli-tool-discovery"


def default_server_config_paths(cwd: Path | None = None) -> list[Path]:
    """Return the candidate MCP server config files, in lookup order."""
    home = Path.home()
    cwd = cwd or Path.cwd()
    return [
        home / ".config" / "cursor" / "mcp.json",
        home / ".config" / "claude" / "mcp.json",
        home / ".config" / "codex" / "mcp.json",
        home / ".claude" / "mcp.json",
        cwd / ".claude" / "mcp.json",
        cwd / ".mcp.json",
    ]


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Invalid float value for {key}: {value}, using default")
        return default
    if parsed < 0:
        logger.warning(f"Negative value for {key}: {value}, using default")
        return default
    return parsed


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid int value for {key}: {value}, using default")
        return default
    if parsed < 1:
        logger.warning(f"Non-positive value for {key}: {value}, using default")
        return default
    return parsed


def _get_bool(key: str, default: bool) -> bool:  # noqa: FBT001
    value = os.getenv(key)
    if not value:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Invalid boolean value for {key}: {value}, using default")
    return default


@dataclass
class DiscoveryConfig:
    """Settings for building, caching and serving the tool registry.

    Attributes:
        cache_dir: Directory holding the registry cache and session files
        cache_ttl: Seconds a cached registry stays fresh (default 86400)
        build_timeout: Overall wall-clock budget for a build (default 30.0)
        probe_timeout: Timeout for each version query subprocess (default 5.0)
        server_timeout: Timeout for each MCP server introspection (default 10.0)
        max_workers: Size of the probe worker pool (default 8)
        introspect_servers: Connect to configured servers to list capabilities
        hook_wait: Seconds the non-blocking path waits for a background build
        allow_fallback: Whether the hardcoded minimal registry may be served
        server_config_paths: Candidate MCP server config files, in order
        seed_tools: Tool names probed on every build (None for the curated set)
    """

    cache_dir: Path = field(default_factory=default_cache_dir)
    cache_ttl: float = 86400.0
    build_timeout: float = 30.0
    probe_timeout: float = 5.0
    server_timeout: float = 10.0
    max_workers: int = 8
    introspect_servers: bool = True
    hook_wait: float = 0.0
    allow_fallback: bool = True
    server_config_paths: list[Path] = field(default_factory=default_server_config_paths)
    seed_tools: tuple[str, ...] | None = None

    @property
    def cache_path(self) -> Path:
        """Path of the registry cache file."""
        return self.cache_dir / REGISTRY_FILENAME

    @property
    def project_context_path(self) -> Path:
        """Path of the project context file written at session start."""
        return self.cache_dir / PROJECT_CONTEXT_FILENAME

    @property
    def session_log_path(self) -> Path:
        """Path of the session-start log file."""
        return self.cache_dir / SESSION_LOG_FILENAME

    @classmethod
    def from_env(cls) -> "DiscoveryConfig":
        """Create configuration from environment variables.

        Environment Variables:
            TOOL_DISCOVERY_CACHE_DIR: Cache directory
            TOOL_DISCOVERY_CACHE_TTL: Freshness threshold in seconds
            TOOL_DISCOVERY_BUILD_TIMEOUT: Overall build budget in seconds
            TOOL_DISCOVERY_PROBE_TIMEOUT: Per version query timeout
            TOOL_DISCOVERY_SERVER_TIMEOUT: Per server introspection timeout
            TOOL_DISCOVERY_MAX_WORKERS: Probe worker pool size
            TOOL_DISCOVERY_INTROSPECT_SERVERS: Connect to configured servers
            TOOL_DISCOVERY_HOOK_WAIT: Background build wait on the hook path
            TOOL_DISCOVERY_ALLOW_FALLBACK: Allow the minimal fallback registry
            TOOL_DISCOVERY_SERVER_CONFIGS: os.pathsep separated config paths

        Returns:
            DiscoveryConfig with values from environment or defaults.
        """
        cache_dir_value = os.getenv("TOOL_DISCOVERY_CACHE_DIR")
        cache_dir = (
            Path(cache_dir_value).expanduser()
            if cache_dir_value
            else default_cache_dir()
        )

        server_configs_value = os.getenv("TOOL_DISCOVERY_SERVER_CONFIGS")
        if server_configs_value:
            server_config_paths = [
                Path(p).expanduser()
                for p in server_configs_value.split(os.pathsep)
                if p.strip()
            ]
        else:
            server_config_paths = default_server_config_paths()

        return cls(
            cache_dir=cache_dir,
            cache_ttl=_get_float("TOOL_DISCOVERY_CACHE_TTL", 86400.0),
            build_timeout=_get_float("TOOL_DISCOVERY_BUILD_TIMEOUT", 30.0),
            probe_timeout=_get_float("TOOL_DISCOVERY_PROBE_TIMEOUT", 5.0),
            server_timeout=_get_float("TOOL_DISCOVERY_SERVER_TIMEOUT", 10.0),
            max_workers=_get_int("TOOL_DISCOVERY_MAX_WORKERS", 8),
            introspect_servers=_get_bool("TOOL_DISCOVERY_INTROSPECT_SERVERS", True),
            hook_wait=_get_float("TOOL_DISCOVERY_HOOK_WAIT", 0.0),
            allow_fallback=_get_bool("TOOL_DISCOVERY_ALLOW_FALLBACK", True),
            server_config_paths=server_config_paths,
        )
