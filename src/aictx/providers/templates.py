"""Provider document templates.

Each function takes the project metadata and the reference to the log (as it
should appear inside that particular file) and returns the full text.
"""

from __future__ import annotations

from aictx.providers.base import ProjectMeta

MARKDOWN_MARKER = "<!-- CONTEXT-SYSTEM-MANAGED -->"
PLAINTEXT_MARKER = "# CONTEXT-SYSTEM-MANAGED"


def _meta_line(meta: ProjectMeta) -> str:
    return f"Project: {meta.name} | Branch: {meta.branch} | Updated: {meta.updated}"


# ── Markdown reference (CLAUDE.md) ───────────────────────────


def markdown_reference_new(meta: ProjectMeta, reference: str) -> str:
    return (
        "# Claude Context\n"
        f"{MARKDOWN_MARKER}\n"
        f"{_meta_line(meta)}\n"
        "\n"
        "## Project Context\n"
        f"{reference}\n"
        "\n"
        "## Usage\n"
        "This file provides Claude with persistent project context through file references.\n"
        "All project-specific information is maintained in the memory file above.\n"
    )


def markdown_reference_prefix(meta: ProjectMeta, reference: str, existing: str) -> str:
    return (
        f"{MARKDOWN_MARKER}\n"
        f"{_meta_line(meta)}\n"
        "\n"
        "## Project Context\n"
        f"{reference}\n"
        "\n"
        "---\n"
        "\n"
        f"{existing}"
    )


# ── Plaintext rules (.cursorrules) ───────────────────────────


def plaintext_new(meta: ProjectMeta, reference: str) -> str:
    return (
        "# Cursor Rules\n"
        f"{PLAINTEXT_MARKER}\n"
        f"# Project: {meta.name} | Updated: {meta.updated}\n"
        "\n"
        f"# Always check {reference} for project-specific context\n"
        "# All project decisions and patterns are documented there\n"
    )


def plaintext_prefix(meta: ProjectMeta, reference: str, existing: str) -> str:
    return (
        f"{PLAINTEXT_MARKER}\n"
        f"# Project: {meta.name} | Updated: {meta.updated}\n"
        f"# Always check {reference} for project context\n"
        "\n"
        f"{existing}"
    )


# ── Tool-owned markdown (.github/copilot-instructions.md) ────


def owned_markdown(meta: ProjectMeta, reference: str) -> str:
    return (
        "# GitHub Copilot Instructions\n"
        f"{MARKDOWN_MARKER}\n"
        "\n"
        f"{_meta_line(meta)}\n"
        "\n"
        "## Context Reference\n"
        f"{reference}\n"
        "\n"
        "## Guidelines\n"
        "Reference project-specific context for improved code suggestions.\n"
    )
