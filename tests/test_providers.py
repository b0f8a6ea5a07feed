"""Tests for provider file synchronization."""

from __future__ import annotations

import os
import subprocess

import pytest
from pathlib import Path

from aictx.config import ContextConfig
from aictx.memory.store import MemoryStore
from aictx.providers import templates
from aictx.providers.base import ProjectMeta, SyncAction
from aictx.providers.sync import Synchronizer
from aictx.tools.repo import DEFAULT_BRANCH, RepositoryInfo


class FakeRepo:
    def __init__(self, branch: str = "feature-x"):
        self.branch = branch

    def current_branch(self, project_root: Path) -> str:
        return self.branch


@pytest.fixture
def config(tmp_path: Path) -> ContextConfig:
    return ContextConfig(
        config_dir=tmp_path / "user" / "config",
        data_dir=tmp_path / "user" / "data",
        cache_dir=tmp_path / "user" / "cache",
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    root.mkdir()
    MemoryStore(root).initialize()
    return root


@pytest.fixture
def sync(config: ContextConfig) -> Synchronizer:
    return Synchronizer(config, FakeRepo())


def _actions(results) -> dict[str, SyncAction]:
    return {r.provider: r.action for r in results}


def _snapshot(project: Path) -> dict[str, str]:
    return {
        name: (project / name).read_text()
        for name in ["CLAUDE.md", ".cursorrules", ".github/copilot-instructions.md"]
    }


class TestFreshProject:
    def test_no_log_is_noop(self, sync: Synchronizer, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert sync.sync(empty) == []
        assert list(empty.iterdir()) == []

    def test_creates_all_providers(self, sync: Synchronizer, project: Path):
        results = sync.sync(project)
        assert _actions(results) == {
            "claude": SyncAction.CREATED,
            "cursor": SyncAction.CREATED,
            "copilot": SyncAction.CREATED,
            "gemini": SyncAction.LINKED,
        }

        claude = (project / "CLAUDE.md").read_text()
        assert claude.startswith("# Claude Context\n<!-- CONTEXT-SYSTEM-MANAGED -->\n")
        assert "Project: proj | Branch: feature-x | Updated: " in claude
        assert "@.ai-context/memory.md" in claude

        cursor = (project / ".cursorrules").read_text()
        assert "# CONTEXT-SYSTEM-MANAGED" in cursor
        assert "# Always check .ai-context/memory.md for project-specific context" in cursor

        copilot = (project / ".github" / "copilot-instructions.md").read_text()
        assert "../.ai-context/memory.md" in copilot
        assert "Branch: feature-x" in copilot

    def test_gemini_symlink(self, sync: Synchronizer, project: Path):
        sync.sync(project)
        link = project / "GEMINI.md"
        assert link.is_symlink()
        assert os.readlink(link) == ".ai-context/memory.md"
        assert link.read_text() == (project / ".ai-context" / "memory.md").read_text()

    def test_updated_follows_log_mtime(self, sync: Synchronizer, project: Path):
        log = project / ".ai-context" / "memory.md"
        os.utime(log, (1767225600, 1767225600))  # 2026-01-01T00:00:00Z
        sync.sync(project)
        assert "Updated: 2026-01-01T00:00:00Z" in (project / "CLAUDE.md").read_text()


class TestExistingFiles:
    def test_claude_prefix_preserves_user_content(self, sync: Synchronizer, project: Path):
        (project / "CLAUDE.md").write_text("My rules\n\n- be terse\n")
        results = sync.sync(project)
        assert _actions(results)["claude"] == SyncAction.UPDATED
        text = (project / "CLAUDE.md").read_text()
        assert text.startswith("<!-- CONTEXT-SYSTEM-MANAGED -->\n")
        assert "@.ai-context/memory.md" in text
        assert text.endswith("---\n\nMy rules\n\n- be terse\n")

    def test_cursor_prefix_preserves_user_content(self, sync: Synchronizer, project: Path):
        (project / ".cursorrules").write_text("Use black\n")
        results = sync.sync(project)
        assert _actions(results)["cursor"] == SyncAction.UPDATED
        text = (project / ".cursorrules").read_text()
        assert text.startswith("# CONTEXT-SYSTEM-MANAGED\n")
        assert text.endswith("\n\nUse black\n")

    def test_reference_present_left_alone(self, sync: Synchronizer, project: Path):
        original = "Hand-written\nSee @.ai-context/memory.md\n"
        (project / "CLAUDE.md").write_text(original)
        results = sync.sync(project)
        assert _actions(results)["claude"] == SyncAction.UNCHANGED
        assert (project / "CLAUDE.md").read_text() == original

    def test_copilot_overwritten(self, sync: Synchronizer, project: Path):
        (project / ".github").mkdir()
        (project / ".github" / "copilot-instructions.md").write_text("stale\n")
        results = sync.sync(project)
        assert _actions(results)["copilot"] == SyncAction.REWRITTEN
        assert "stale" not in (project / ".github" / "copilot-instructions.md").read_text()

    def test_replaces_existing_symlink(self, sync: Synchronizer, project: Path):
        (project / "GEMINI.md").symlink_to("elsewhere.md")
        sync.sync(project)
        assert os.readlink(project / "GEMINI.md") == ".ai-context/memory.md"


class TestIdempotency:
    def test_second_sync_changes_nothing(self, sync: Synchronizer, project: Path):
        sync.sync(project)
        before = _snapshot(project)
        results = sync.sync(project)
        assert _snapshot(project) == before
        assert _actions(results) == {
            "claude": SyncAction.UNCHANGED,
            "cursor": SyncAction.UNCHANGED,
            "copilot": SyncAction.REWRITTEN,
            "gemini": SyncAction.LINKED,
        }
        assert (project / "GEMINI.md").is_symlink()

    def test_prefix_inserted_once(self, sync: Synchronizer, project: Path):
        (project / "CLAUDE.md").write_text("My rules\n")
        sync.sync(project)
        sync.sync(project)
        text = (project / "CLAUDE.md").read_text()
        assert text.count("CONTEXT-SYSTEM-MANAGED") == 1
        assert text.count("My rules") == 1


class TestFailureIsolation:
    def test_regular_file_blocks_symlink(self, sync: Synchronizer, project: Path):
        (project / "GEMINI.md").write_text("user gemini notes\n")
        results = sync.sync(project)
        actions = _actions(results)
        assert actions["gemini"] == SyncAction.FAILED
        assert actions["claude"] == SyncAction.CREATED
        assert (project / "GEMINI.md").read_text() == "user gemini notes\n"

    def test_unwritable_provider_does_not_stop_others(
        self, sync: Synchronizer, project: Path, caplog
    ):
        (project / "CLAUDE.md").mkdir()
        with caplog.at_level("WARNING"):
            results = sync.sync(project)
        actions = _actions(results)
        assert actions["claude"] == SyncAction.FAILED
        assert actions["cursor"] == SyncAction.CREATED
        assert actions["copilot"] == SyncAction.CREATED
        assert actions["gemini"] == SyncAction.LINKED
        assert "Cannot sync claude" in caplog.text

    def test_undecodable_provider_does_not_stop_others(
        self, sync: Synchronizer, project: Path, caplog
    ):
        (project / "CLAUDE.md").write_bytes(b"\xff\xfe legacy notes")
        with caplog.at_level("WARNING"):
            results = sync.sync(project)
        actions = _actions(results)
        assert actions["claude"] == SyncAction.FAILED
        assert actions["cursor"] == SyncAction.CREATED
        assert actions["copilot"] == SyncAction.CREATED
        assert actions["gemini"] == SyncAction.LINKED
        assert (project / ".cursorrules").exists()
        assert (project / "CLAUDE.md").read_bytes() == b"\xff\xfe legacy notes"
        assert "Cannot sync claude" in caplog.text

    def test_disabled_provider_skipped(self, config: ContextConfig, project: Path):
        for p in config.providers:
            if p.name == "gemini":
                p.enabled = False
        results = Synchronizer(config, FakeRepo()).sync(project)
        assert "gemini" not in _actions(results)
        assert not (project / "GEMINI.md").exists()


class TestTemplates:
    META = ProjectMeta(name="proj", branch="main", updated="2026-01-01T00:00:00Z")

    def test_prefix_keeps_existing_verbatim(self):
        existing = "  indented\n\n# heading\n"
        text = templates.markdown_reference_prefix(self.META, "@ref.md", existing)
        assert text.endswith(existing)
        text = templates.plaintext_prefix(self.META, "ref.md", existing)
        assert text.endswith(existing)

    def test_owned_markdown_deterministic(self):
        assert templates.owned_markdown(self.META, "../x.md") == templates.owned_markdown(
            self.META, "../x.md"
        )


class TestRepositoryInfo:
    def test_git_missing(self, monkeypatch, tmp_path: Path):
        def boom(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(subprocess, "run", boom)
        assert RepositoryInfo().current_branch(tmp_path) == DEFAULT_BRANCH

    def test_branch_name(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="dev\n", stderr=""),
        )
        assert RepositoryInfo().current_branch(tmp_path) == "dev"

    def test_detached_or_not_a_repo(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="", stderr=""),
        )
        assert RepositoryInfo().current_branch(tmp_path) == DEFAULT_BRANCH
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda cmd, **kw: subprocess.CompletedProcess(cmd, 128, stdout="", stderr="fatal"),
        )
        assert RepositoryInfo().current_branch(tmp_path) == DEFAULT_BRANCH
