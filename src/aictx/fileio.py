"""All-or-nothing file replacement."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from aictx.errors import IOFailure

logger = logging.getLogger(__name__)


def atomic_write(target: Path, content: str, mode: int = 0o644) -> None:
    """Write to a temp file beside `target`, then rename over it.

    Readers see either the old or the new document, never a partial one.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise IOFailure(f"Failed to create temporary file for {target}: {exc}") from exc

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        tmp.chmod(mode)
        os.replace(tmp, target)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise IOFailure(f"Failed to write: {target}: {exc}") from exc

    logger.debug("Successfully wrote: %s", target)
