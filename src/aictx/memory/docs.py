"""Documentation tracking: describe a file, list recently modified docs."""

from __future__ import annotations

import os
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from aictx.errors import InvalidInput, NotFound
from aictx.tools.filemeta import FileMetadata

DOC_SUFFIX = ".md"
_SKIP_DIRS = {".git"}


@dataclass(frozen=True)
class RecentDoc:
    path: str
    modified: str
    size: str
    mtime: float


def describe_doc(
    path: Path, description: str | None, metadata: FileMetadata, label: str | None = None
) -> str:
    """Build the entry text stored for a tracked document.

    `label` is how the path appears in the entry; defaults to `path` itself.
    """
    label = label or str(path)
    if not path.is_file():
        raise NotFound(f"File not found: {label}")
    info = metadata.describe(path)
    entry = f"Doc: {label} - Modified: {info.modified}, Size: {info.size}"
    if description:
        entry = f"{entry} - {description}"
    return entry


def parse_days(value: str | int | None, default: int = 7) -> int:
    if value is None or value == "":
        return default
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Days must be a whole number: {value}") from None
    if days < 0:
        raise InvalidInput(f"Days must not be negative: {days}")
    return days


def find_recent_docs(
    project_root: Path,
    days: int,
    excluded: Iterable[Path],
    metadata: FileMetadata,
    now: float | None = None,
) -> list[RecentDoc]:
    """Markdown files under `project_root` modified in the last `days` days, newest first.

    `excluded` holds absolute paths of files or directories to skip.
    """
    cutoff = (now if now is not None else time.time()) - days * 86400
    skip = {p.resolve() for p in excluded}

    docs: list[RecentDoc] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        current = Path(dirpath)
        dirnames[:] = [
            d for d in dirnames if d not in _SKIP_DIRS and (current / d).resolve() not in skip
        ]
        for name in filenames:
            path = current / name
            if path.suffix != DOC_SUFFIX or path.resolve() in skip:
                continue
            if path.is_symlink():
                continue
            info = metadata.describe(path)
            if info.mtime <= cutoff:
                continue
            rel = f"./{path.relative_to(project_root).as_posix()}"
            docs.append(RecentDoc(path=rel, modified=info.modified, size=info.size, mtime=info.mtime))

    docs.sort(key=lambda d: d.mtime, reverse=True)
    return docs
