"""Exceptions raised by the tool discovery package."""


class ToolDiscoveryError(Exception):
    """Base class for tool discovery errors."""


class CacheError(ToolDiscoveryError):
    """Raised when a registry cache document cannot be decoded."""


class RegistryUnavailableError(ToolDiscoveryError):
    """Raised when no registry can be produced at all.

    This is distinct from an empty match result: it means there was no
    readable cache, the build failed and no fallback registry was allowed.
    """


class RegistryBuildError(ToolDiscoveryError):
    """Raised when a build finishes no probe and discovers no server."""
