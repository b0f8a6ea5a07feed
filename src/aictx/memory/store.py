"""Project memory log — `.ai-context/memory.md`.

The log is a flat markdown document: a fixed header followed by entry blocks
of the form::

    ## [category] 2026-01-01T00:00:00Z
    content

Every write loads the whole document, appends, and atomically replaces it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import frontmatter

from aictx import __version__
from aictx.config import ProviderConfig
from aictx.errors import IOFailure, NotFound
from aictx.fileio import atomic_write
from aictx.memory.validation import MAX_FILTER_LENGTH, looks_like_secret, validate_text

logger = logging.getLogger(__name__)

MEMORY_FILENAME = "memory.md"
MANAGED_MARKER = "CONTEXT-SYSTEM"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

LOG_HEADER = f"# Project Context\n\nGenerated by Context Management System v{__version__}\n"
ENTRY_HEADER = re.compile(r"^## \[([^\]\n]+)\] ?(\S*)$", re.MULTILINE)

GITIGNORE_BLOCK = "\n# AI context (contains project decisions/memory)\n{entry}/\n"


def utc_timestamp(moment: datetime | None = None) -> str:
    return (moment or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class MemoryEntry:
    """One appended block. Never edited after it is written."""

    category: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        return f"## [{self.category}] {utc_timestamp(self.timestamp)}\n{self.content}\n"


def split_blocks(text: str) -> tuple[str, list[str]]:
    """Split a log into (preamble, [entry block, ...])."""
    starts = [m.start() for m in ENTRY_HEADER.finditer(text)]
    if not starts:
        return text, []
    blocks = [text[a:b].rstrip("\n") for a, b in zip(starts, starts[1:] + [len(text)])]
    return text[: starts[0]], blocks


def count_entries(text: str) -> int:
    return len(ENTRY_HEADER.findall(text))


class MemoryStore:
    """Read/write access to one project's memory log."""

    def __init__(self, project_root: Path, context_dir_name: str = ".ai-context") -> None:
        self.project_root = project_root
        self.context_dir_name = context_dir_name

    @property
    def context_dir(self) -> Path:
        return self.project_root / self.context_dir_name

    @property
    def memory_file(self) -> Path:
        return self.context_dir / MEMORY_FILENAME

    @property
    def gitignore(self) -> Path:
        return self.project_root / ".gitignore"

    def exists(self) -> bool:
        return self.memory_file.is_file()

    def read(self) -> str:
        try:
            return self.memory_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailure(f"Cannot read {self.memory_file}: {exc}") from exc

    # ── Setup ─────────────────────────────────────────────────

    def ensure_context_dir(self) -> None:
        try:
            self.context_dir.mkdir(parents=True, exist_ok=True)
            self.context_dir.chmod(0o755)
        except OSError as exc:
            raise IOFailure(f"Cannot create {self.context_dir}: {exc}") from exc

    def is_gitignored(self) -> bool:
        if not self.gitignore.is_file():
            return False
        try:
            text = self.gitignore.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise IOFailure(f"Cannot read {self.gitignore}: {exc}") from exc
        lines = text.splitlines()
        return any(line.startswith(self.context_dir_name) for line in lines)

    def ensure_gitignored(self) -> bool:
        """Make sure the ignore-list names the context directory.

        Appends to an existing `.gitignore`; creates one only inside a git
        checkout. Returns True when the file was modified.
        """
        if self.is_gitignored():
            return False
        block = GITIGNORE_BLOCK.format(entry=self.context_dir_name)
        try:
            if self.gitignore.is_file():
                with self.gitignore.open("a", encoding="utf-8") as f:
                    f.write(block)
            elif (self.project_root / ".git").is_dir():
                self.gitignore.write_text(block.lstrip("\n"), encoding="utf-8")
            else:
                return False
        except OSError as exc:
            raise IOFailure(f"Cannot update {self.gitignore}: {exc}") from exc
        logger.info("Added %s/ to .gitignore", self.context_dir_name)
        return True

    # ── Writes ────────────────────────────────────────────────

    def _write(self, text: str) -> None:
        atomic_write(self.memory_file, text)

    def initialize(self) -> bool:
        """Create the log with its header. Returns False if it already existed."""
        if self.exists():
            return False
        self.ensure_context_dir()
        self._write(LOG_HEADER)
        logger.info("Initialized %s", self.memory_file)
        return True

    def append(self, entry: MemoryEntry) -> None:
        self.append_many([entry])

    def append_many(self, entries: Iterable[MemoryEntry]) -> None:
        text = self.read() if self.exists() else LOG_HEADER
        for entry in entries:
            text = text.rstrip("\n") + "\n\n" + entry.render()
        self._write(text)

    def import_existing(self, providers: Iterable[ProviderConfig]) -> list[str]:
        """Copy unmanaged provider files into the log. Returns provider names imported."""
        self.ensure_context_dir()
        self.initialize()

        imported: list[str] = []
        entries: list[MemoryEntry] = []
        for provider in providers:
            if provider.format == "symlink":
                continue
            path = self.project_root / provider.file
            if not path.is_file() or path.is_symlink():
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                logger.warning("Skipping %s: not valid UTF-8", provider.file)
                continue
            except OSError as exc:
                raise IOFailure(f"Cannot read {path}: {exc}") from exc
            if MANAGED_MARKER in text:
                continue
            logger.info("Importing existing %s", provider.file)
            entries.append(
                MemoryEntry(
                    category=f"imported-{provider.name}",
                    content=f"From {provider.file}{_describe_front_matter(text)}",
                )
            )
            imported.append(provider.name)

        if entries:
            self.append_many(entries)
        return imported

    # ── Reads ─────────────────────────────────────────────────

    def retrieve(self, query: str | None = None) -> str | None:
        """Return the whole log, or the entry blocks matching `query`.

        None means the log exists but nothing matched.
        """
        if not self.exists():
            raise NotFound("No context found in current project.")
        text = self.read()
        if not query:
            return text

        query = validate_text(query, MAX_FILTER_LENGTH)
        needle = re.compile(query, re.IGNORECASE)
        _, blocks = split_blocks(text)
        matches = [b for b in blocks if needle.search(b)]
        return "\n\n".join(matches) if matches else None

    def entry_count(self) -> int:
        return count_entries(self.read()) if self.exists() else 0

    def has_suspected_secrets(self) -> bool:
        return self.exists() and looks_like_secret(self.read())


def _describe_front_matter(text: str) -> str:
    """Render `: body`, prefixed with front-matter keys when the file has any."""
    try:
        post = frontmatter.loads(text)
    except Exception as exc:
        logger.debug("Unparseable front matter, importing verbatim: %s", exc)
        return f": {text.strip()}"
    if not post.metadata:
        return f": {text.strip()}"
    keys = ", ".join(f"{k}={v}" for k, v in post.metadata.items())
    return f" ({keys}): {post.content.strip()}"
