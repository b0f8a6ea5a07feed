"""Provider protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProjectMeta:
    """Fields interpolated into every provider template."""

    name: str
    branch: str
    updated: str


class SyncAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REWRITTEN = "rewritten"
    LINKED = "linked"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Outcome of synchronizing one provider."""

    provider: str
    path: Path
    action: SyncAction
    detail: str = ""


@runtime_checkable
class Provider(Protocol):
    """Protocol that every provider file strategy implements."""

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> Path: ...

    def sync(self, meta: ProjectMeta) -> SyncAction:
        """Bring the provider file in line with the log. Raises OSError on failure."""
        ...

    def exists(self) -> bool:
        """Whether the provider artifact is present."""
        ...
