"""Local availability probing for command line tools."""

from __future__ import annotations

import logging
import shutil
import subprocess

from .metadata import categorize, describe
from .types import LOCAL_BINARY, NOT_INSTALLED, UNKNOWN_VERSION, ToolEntry

logger = logging.getLogger("tool-discovery.prober")

# Tried in order; the first non-empty successful output wins.
VERSION_FLAGS: tuple[str, ...] = ("--version", "-V")

DEFAULT_PROBE_TIMEOUT = 5.0


def unavailable_entry(name: str) -> ToolEntry:
    """Build the entry for a tool that is known but not resolvable."""
    return ToolEntry(
        name=name,
        type=LOCAL_BINARY,
        description=describe(name),
        category=categorize(name),
        available=False,
        location=NOT_INSTALLED,
        version=UNKNOWN_VERSION,
    )


def query_version(executable: str, timeout: float = DEFAULT_PROBE_TIMEOUT) -> str:
    """Ask an executable for its version string.

    Args:
        executable: Resolved path of the executable
        timeout: Seconds to wait for each attempt

    Returns:
        The first line of the first non-empty version output, or
        ``"unknown"`` if every attempt fails.
    """
    for flag in VERSION_FLAGS:
        try:
            result = subprocess.run(
                [executable, flag],
                capture_output=True,
                text=True,
                errors="replace",
                stdin=subprocess.DEVNULL,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug(f"{executable} {flag} timed out after {timeout}s")
            continue
        except OSError as e:
            logger.debug(f"{executable} {flag} could not be run: {e}")
            continue

        if result.returncode != 0:
            continue

        # Some tools (ssh -V, java -version) report on stderr.
        output = (result.stdout or "").strip() or (result.stderr or "").strip()
        if output:
            return output.splitlines()[0].strip()

    return UNKNOWN_VERSION


def probe(name: str, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ToolEntry:
    """Check whether a tool is installed and which version it is.

    Never raises for a missing tool or a failing version query; both are
    recorded in the returned entry.

    Args:
        name: Tool name (or path) to resolve on PATH
        timeout: Seconds allowed for each version query

    Returns:
        The tool entry, with sentinel location/version when unavailable.
    """
    location = shutil.which(name)
    if not location:
        logger.debug(f"{name} not found on PATH")
        return unavailable_entry(name)

    version = query_version(location, timeout)
    logger.debug(f"Probed {name}: {location} ({version})")
    return ToolEntry(
        name=name,
        type=LOCAL_BINARY,
        description=describe(name),
        category=categorize(name),
        available=True,
        location=location,
        version=version,
    )
