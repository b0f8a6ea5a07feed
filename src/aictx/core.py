"""Context manager — the single entry point behind every CLI command.

Responsibilities:
1. Validate and store entries (with the secret advisory check)
2. Keep `.gitignore` covering the context directory
3. Import pre-existing provider files on first use
4. Trigger provider synchronization after each store
5. Derive status and documentation listings
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from aictx.config import ContextConfig
from aictx.errors import SecretDetected
from aictx.memory.docs import RecentDoc, describe_doc, find_recent_docs, parse_days
from aictx.memory.store import MemoryEntry, MemoryStore
from aictx.memory.validation import (
    is_sensitive_category,
    looks_like_secret,
    validate_identifier,
    validate_text,
)
from aictx.providers.base import SyncResult
from aictx.providers.sync import Synchronizer
from aictx.tools.filemeta import FileMetadata
from aictx.tools.repo import RepositoryInfoProvider

logger = logging.getLogger(__name__)

# Receives the warning text, returns True to proceed
ConfirmCallback = Callable[[str], bool]

SENSITIVE_CATEGORY_WARNING = (
    "Storing secrets? Consider using references instead:\n"
    "   Example: 'AWS creds in 1Password vault: Production'"
)
SECRET_CONTENT_WARNING = "Detected possible secret. Use references instead of values!"


@dataclass
class StatusReport:
    """Derived, read-only view of a project's context state."""

    project_root: Path
    log_exists: bool
    entry_count: int = 0
    providers: dict[str, bool] = field(default_factory=dict)
    gitignored: bool = False
    secrets_suspected: bool = False


class ContextManager:
    """Operations on one project directory."""

    def __init__(
        self,
        config: ContextConfig,
        project_root: Path,
        *,
        confirm: ConfirmCallback | None = None,
        repo_info: RepositoryInfoProvider | None = None,
        file_metadata: FileMetadata | None = None,
    ) -> None:
        self.config = config
        self.project_root = project_root
        self.memory = MemoryStore(project_root, config.context_dir_name)
        self.synchronizer = Synchronizer(config, repo_info)
        self.file_metadata = file_metadata or FileMetadata()
        self._confirm = confirm

    # ── Store ────────────────────────────────────────────────

    def _check_sensitive(self, category: str, content: str, force: bool) -> None:
        warnings = []
        if is_sensitive_category(category):
            warnings.append(SENSITIVE_CATEGORY_WARNING)
        if looks_like_secret(content):
            warnings.append(SECRET_CONTENT_WARNING)
        if not warnings or force:
            return

        message = "\n".join(warnings)
        if self._confirm is None:
            raise SecretDetected(
                f"{message}\n   Skipping in non-interactive mode. Use -f to force."
            )
        if not self._confirm(message):
            raise SecretDetected("Store cancelled")

    def store(self, category: str, content: str, *, force: bool = False) -> MemoryEntry:
        """Validate, append one entry to the log, then sync providers."""
        category = validate_identifier(category)
        content = validate_text(content)
        self._check_sensitive(category, content, force)

        self.memory.ensure_context_dir()
        self.memory.ensure_gitignored()

        if not self.memory.exists():
            self.import_existing()

        entry = MemoryEntry(category=category, content=content)
        self.memory.append(entry)
        logger.info("Context stored: [%s] %s...", category, content[:50])

        if self.config.features.auto_sync:
            self._sync_quietly()
        return entry

    def _sync_quietly(self) -> None:
        try:
            self.sync()
        except Exception:
            logger.warning("Provider sync failed", exc_info=True)

    # ── Sync / import ────────────────────────────────────────

    def sync(self) -> list[SyncResult]:
        return self.synchronizer.sync(self.project_root)

    def import_existing(self) -> list[str]:
        """Ingest unmanaged provider files into the log."""
        imported = self.memory.import_existing(self.config.enabled_providers())
        if imported:
            logger.info("Imported %d existing context files", len(imported))
        return imported

    # ── Reads ────────────────────────────────────────────────

    def retrieve(self, query: str | None = None) -> str | None:
        return self.memory.retrieve(query)

    def status(self) -> StatusReport:
        report = StatusReport(project_root=self.project_root, log_exists=self.memory.exists())
        if not report.log_exists:
            return report
        report.entry_count = self.memory.entry_count()
        report.providers = {
            p.name: p.exists() for p in self.synchronizer.providers(self.project_root)
        }
        report.gitignored = self.memory.is_gitignored()
        report.secrets_suspected = self.memory.has_suspected_secrets()
        return report

    # ── Documentation tracking ───────────────────────────────

    def track_doc(
        self, doc_path: str, description: str | None = None, *, force: bool = False
    ) -> MemoryEntry:
        entry = describe_doc(
            self.project_root / doc_path, description, self.file_metadata, label=doc_path
        )
        return self.store("docs", entry, force=force)

    def recent_docs(self, days: str | int | None = None) -> list[RecentDoc]:
        excluded = [self.memory.context_dir] + [
            self.project_root / p.file for p in self.config.providers
        ]
        return find_recent_docs(
            self.project_root, parse_days(days), excluded, self.file_metadata
        )
