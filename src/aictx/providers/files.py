"""File strategies for the four provider formats."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from aictx.config import ProviderConfig
from aictx.fileio import atomic_write
from aictx.providers import templates
from aictx.providers.base import ProjectMeta, Provider, SyncAction

logger = logging.getLogger(__name__)

NewRenderer = Callable[[ProjectMeta, str], str]
PrefixRenderer = Callable[[ProjectMeta, str, str], str]


def _relative_reference(log_path: Path, from_file: Path) -> str:
    return Path(os.path.relpath(log_path, from_file.parent)).as_posix()


class ReferenceFileProvider:
    """User-editable file that must carry a reference to the log.

    Created from a template when absent. When present without the reference,
    a managed block is inserted above the user's content. Otherwise untouched.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        log_path: Path,
        render_new: NewRenderer,
        render_prefix: PrefixRenderer,
        reference_prefix: str = "",
    ) -> None:
        self._name = name
        self._path = path
        self.reference = reference_prefix + _relative_reference(log_path, path)
        self._render_new = render_new
        self._render_prefix = render_prefix

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def sync(self, meta: ProjectMeta) -> SyncAction:
        if self._path.is_file():
            existing = self._path.read_text(encoding="utf-8")
            if self.reference in existing:
                return SyncAction.UNCHANGED
            atomic_write(self._path, self._render_prefix(meta, self.reference, existing))
            logger.info("Added context reference to existing %s", self._path.name)
            return SyncAction.UPDATED

        self._path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(self._path, self._render_new(meta, self.reference))
        return SyncAction.CREATED


class OwnedFileProvider:
    """File fully owned by the tool, rewritten on every sync."""

    def __init__(self, name: str, path: Path, log_path: Path) -> None:
        self._name = name
        self._path = path
        self.reference = _relative_reference(log_path, path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def sync(self, meta: ProjectMeta) -> SyncAction:
        existed = self._path.exists()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(self._path, templates.owned_markdown(meta, self.reference))
        return SyncAction.REWRITTEN if existed else SyncAction.CREATED


class SymlinkProvider:
    """Symbolic link pointing straight at the log."""

    def __init__(self, name: str, path: Path, log_path: Path) -> None:
        self._name = name
        self._path = path
        self.target = _relative_reference(log_path, path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_symlink()

    def sync(self, meta: ProjectMeta) -> SyncAction:
        if self._path.is_symlink():
            self._path.unlink()
        # A regular file in the way is left alone; symlink_to raises FileExistsError
        self._path.symlink_to(self.target)
        return SyncAction.LINKED


def build_provider(config: ProviderConfig, project_root: Path, log_path: Path) -> Provider:
    """Map a configured provider to its file strategy."""
    path = project_root / config.file
    if config.format == "markdown_reference":
        return ReferenceFileProvider(
            config.name,
            path,
            log_path,
            templates.markdown_reference_new,
            templates.markdown_reference_prefix,
            reference_prefix="@",
        )
    if config.format == "plaintext":
        return ReferenceFileProvider(
            config.name, path, log_path, templates.plaintext_new, templates.plaintext_prefix
        )
    if config.format == "markdown":
        return OwnedFileProvider(config.name, path, log_path)
    if config.format == "symlink":
        return SymlinkProvider(config.name, path, log_path)
    raise ValueError(f"Unknown provider format '{config.format}' for {config.name}")
