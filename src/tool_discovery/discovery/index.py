"""Query surface over the cached tool registry."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from ..config import DiscoveryConfig
from ..exceptions import RegistryBuildError, RegistryUnavailableError
from .builder import build_registry, fallback_registry
from .cache import is_fresh, load_registry, save_registry
from .matching import match, related_tools
from .metadata import examples_for
from .types import LOCAL_BINARY, Query, Registry, ToolDetail, ToolEntry

logger = logging.getLogger("tool-discovery.index")


class ToolDiscoveryIndex:
    """Serves discovery queries from a registry snapshot.

    The index never mutates a registry. It holds the most recent snapshot
    it produced or loaded and replaces it wholesale on refresh; callers
    get ``Registry`` values back and keep them as long as they like.
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        builder: Callable[[DiscoveryConfig], Registry] = build_registry,
    ) -> None:
        self.config = config or DiscoveryConfig.from_env()
        self._builder = builder
        self._registry: Registry | None = None
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._pending: Future[Registry] | None = None

    @property
    def registry(self) -> Registry | None:
        """The last registry this index loaded or built, if any."""
        return self._registry

    # ------------------------------------------------------------------
    # Registry lifecycle
    # ------------------------------------------------------------------

    def refresh(self) -> Registry:
        """Build a new registry synchronously and persist it.

        When the build completes nothing, the best available registry is
        returned instead (see ``_best_available``). A minimal fallback is
        written only when there is no readable cache at all, so a stale
        cache is never replaced by it.

        Raises:
            RegistryUnavailableError: If the build failed, there is no cache
                and the fallback registry is not allowed.
        """
        try:
            registry = self._builder(self.config)
        except RegistryBuildError as e:
            logger.warning(f"Tool registry build failed: {e}")
            stale = load_registry(self.config.cache_path)
            registry = self._best_available(stale)
            if stale is None:
                self._save(registry)
            return registry

        self._save(registry)
        self._registry = registry
        return registry

    def _save(self, registry: Registry) -> None:
        try:
            save_registry(registry, self.config.cache_path)
        except OSError as e:
            logger.warning(f"Failed to save tool registry: {e}")

    def start_background_refresh(self) -> Future[Registry]:
        """Start a refresh without blocking.

        Returns:
            A future resolving to the new registry. While a refresh is in
            flight, further calls return the same future.
        """
        with self._lock:
            if self._pending is not None and not self._pending.done():
                return self._pending
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="registry-refresh"
                )
            logger.debug("Starting background registry refresh")
            self._pending = self._executor.submit(self.refresh)
            return self._pending

    def ensure_registry(self, wait: bool = True) -> Registry:  # noqa: FBT001, FBT002
        """Return a usable registry, rebuilding it when needed.

        A fresh cache is returned as is. Otherwise, with ``wait=True`` the
        registry is rebuilt before returning. With ``wait=False`` a
        background rebuild is started and, unless it finishes within
        ``config.hook_wait`` seconds, the stale cache or the fallback
        registry is returned tagged ``fallback=True``.

        Raises:
            RegistryUnavailableError: If no registry can be produced at all.
        """
        cached = load_registry(self.config.cache_path)
        if cached is not None and is_fresh(cached, self.config.cache_ttl):
            self._registry = cached
            return cached

        if wait:
            pending = self._pending
            try:
                if pending is not None and not pending.done():
                    logger.debug("Waiting for the running background refresh")
                    return pending.result()
                return self.refresh()
            except RegistryUnavailableError:
                raise
            except Exception as e:
                logger.error(f"Tool registry build failed: {e}")
                return self._best_available(cached)

        future = self.start_background_refresh()
        try:
            return future.result(timeout=self.config.hook_wait)
        except FutureTimeoutError:
            logger.debug("Background refresh still running, serving best available")
        except Exception as e:
            logger.error(f"Background tool registry build failed: {e}")
        return self._best_available(cached)

    def _best_available(self, stale: Registry | None) -> Registry:
        if stale is not None:
            registry = dataclasses.replace(stale, fallback=True)
        elif self._registry is not None:
            registry = dataclasses.replace(self._registry, fallback=True)
        elif self.config.allow_fallback:
            registry = fallback_registry()
        else:
            raise RegistryUnavailableError(
                "No tool registry is available: no cache, build failed, "
                "fallback disabled"
            )
        self._registry = registry
        return registry

    def close(self) -> None:
        """Stop the background executor without waiting for it."""
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def discover(
        self,
        query: Query,
        limit: int | None = None,
        available_only: bool = False,  # noqa: FBT001, FBT002
    ) -> list[ToolEntry]:
        """Match a query against the registry.

        Args:
            query: Mode and value to match
            limit: Maximum results to return
            available_only: Drop entries that are not installed

        Returns:
            Matching entries, most relevant first; empty when nothing matches.
        """
        results = match(query, self.ensure_registry())
        if available_only:
            results = [e for e in results if e.available]
        if limit is not None:
            results = results[:limit]
        return results

    def list_tools(
        self,
        category: str | None = None,
        available_only: bool = False,  # noqa: FBT001, FBT002
    ) -> list[ToolEntry]:
        """List registry entries, optionally for one category."""
        registry = self.ensure_registry()
        if category:
            entries = match(Query("category", category), registry)
        else:
            entries = list(registry.entries)
        if available_only:
            entries = [e for e in entries if e.available]
        return entries

    def describe(self, name: str) -> ToolEntry | None:
        """Look up a single tool by name.

        When a local binary and a remote capability share the name, the
        available one wins, then the local binary.

        Returns:
            The entry if found, None otherwise.
        """
        candidates = self.ensure_registry().find(name)
        if not candidates:
            return None
        candidates.sort(key=lambda e: (not e.available, e.type != LOCAL_BINARY))
        return candidates[0]

    def detail(self, name: str, related_limit: int = 5) -> ToolDetail | None:
        """Describe a tool with its usage examples and related tools."""
        entry = self.describe(name)
        if entry is None:
            return None
        registry = self._registry or self.ensure_registry()
        return ToolDetail(
            entry=entry,
            examples=tuple(examples_for(entry.name)),
            related=tuple(related_tools(entry, registry, limit=related_limit)),
        )
