"""File modification time and size, formatted for humans."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
_UNITS = ("K", "M", "G", "T")


@dataclass(frozen=True)
class FileInfo:
    """Display-ready metadata for one file."""

    modified: str
    size: str
    mtime: float = 0.0


def human_size(num_bytes: int) -> str:
    """Format a byte count the way `du -h` does: 512B, 4.0K, 12M."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    value = float(num_bytes)
    for unit in _UNITS:
        value /= 1024
        if value < 10:
            return f"{value:.1f}{unit}"
        if value < 1024 or unit == _UNITS[-1]:
            return f"{value:.0f}{unit}"
    return f"{value:.0f}{_UNITS[-1]}"


class FileMetadata:
    """Reads stat information; unreadable files yield `unknown` fields."""

    time_format = "%Y-%m-%d %H:%M"

    def describe(self, path: Path) -> FileInfo:
        try:
            st = path.stat()
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", path, exc)
            return FileInfo(modified=UNKNOWN, size=UNKNOWN)
        modified = datetime.fromtimestamp(st.st_mtime).strftime(self.time_format)
        return FileInfo(modified=modified, size=human_size(st.st_size), mtime=st.st_mtime)
