"""Repository information via the `git` CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


class RepositoryInfoProvider(Protocol):
    def current_branch(self, project_root: Path) -> str: ...


class RepositoryInfo:
    """Reads the current branch with `git branch --show-current`."""

    def __init__(self, timeout: float = 5) -> None:
        self.timeout = timeout

    def current_branch(self, project_root: Path) -> str:
        try:
            result = subprocess.run(
                ["git", "-C", str(project_root), "branch", "--show-current"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            logger.debug("git unavailable, assuming branch %s", DEFAULT_BRANCH)
            return DEFAULT_BRANCH

        if result.returncode != 0:
            return DEFAULT_BRANCH
        # Detached HEAD prints nothing
        return result.stdout.strip() or DEFAULT_BRANCH


class NoRepositoryInfo:
    """Fallback used when version control should not be consulted."""

    def current_branch(self, project_root: Path) -> str:
        return DEFAULT_BRANCH
