"""Provider synchronization — best-effort, per-provider failure isolation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from aictx.config import ContextConfig
from aictx.errors import IOFailure
from aictx.memory.store import MemoryStore, utc_timestamp
from aictx.providers.base import ProjectMeta, Provider, SyncAction, SyncResult
from aictx.providers.files import build_provider
from aictx.tools.repo import RepositoryInfo, RepositoryInfoProvider

logger = logging.getLogger(__name__)


class Synchronizer:
    """Keeps every enabled provider file pointing at the project log."""

    def __init__(
        self,
        config: ContextConfig,
        repo_info: RepositoryInfoProvider | None = None,
    ) -> None:
        self.config = config
        self.repo_info = repo_info or RepositoryInfo()

    def providers(self, project_root: Path) -> list[Provider]:
        log_path = MemoryStore(project_root, self.config.context_dir_name).memory_file
        return [
            build_provider(p, project_root, log_path) for p in self.config.enabled_providers()
        ]

    def project_meta(self, project_root: Path, log_path: Path) -> ProjectMeta:
        # Updated time follows the log, so a re-sync without new entries renders the same text
        updated = datetime.fromtimestamp(log_path.stat().st_mtime, tz=timezone.utc)
        return ProjectMeta(
            name=project_root.name,
            branch=self.repo_info.current_branch(project_root),
            updated=utc_timestamp(updated),
        )

    def sync(self, project_root: Path) -> list[SyncResult]:
        store = MemoryStore(project_root, self.config.context_dir_name)
        if not store.exists():
            logger.debug("No memory log in %s, nothing to sync", project_root)
            return []

        meta = self.project_meta(project_root, store.memory_file)
        results: list[SyncResult] = []
        for provider in self.providers(project_root):
            try:
                action = provider.sync(meta)
                results.append(SyncResult(provider.name, provider.path, action))
            except (OSError, UnicodeDecodeError, IOFailure) as exc:
                logger.warning("Cannot sync %s (%s): %s", provider.name, provider.path, exc)
                results.append(
                    SyncResult(provider.name, provider.path, SyncAction.FAILED, str(exc))
                )

        logger.info("Provider synchronization completed")
        return results
