"""Project type detection for session start."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from .cache import write_json_atomic
from .metadata import PROJECT_MARKERS
from .types import ProjectContext

logger = logging.getLogger("tool-discovery.context")


def detect_project_context(
    project_root: Path,
    which: Callable[[str], str | None] = shutil.which,
    session_id: str | None = None,
) -> ProjectContext:
    """Detect the project type from marker files and confirm its tools.

    Args:
        project_root: Directory to inspect
        which: Resolver used to confirm tools are on PATH
        session_id: Session identifier, defaults to $SESSION_ID

    Returns:
        ProjectContext listing only the recommended tools that resolve.
    """
    project_type = "unknown"
    candidates: list[str] = []
    for markers, marker_type, tools in PROJECT_MARKERS:
        if any((project_root / marker).is_file() for marker in markers):
            project_type = marker_type
            candidates = tools
            break

    confirmed = [tool for tool in candidates if which(tool)]
    logger.info(f"Detected {project_type} project at {project_root}")
    return ProjectContext(
        project_type=project_type,
        project_root=str(project_root),
        recommended_tools=confirmed,
        session_id=session_id or os.getenv("SESSION_ID", "unknown"),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def write_project_context(context: ProjectContext, path: Path) -> None:
    """Write the project context file atomically."""
    write_json_atomic(path, context.to_dict())
