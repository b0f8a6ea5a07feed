"""Entry point: context <command> [args]  (or python -m aictx <command>)

- store / remember     Append an entry to .ai-context/memory.md and sync providers
- retrieve / recall    Print the log, or the entries matching a filter
- status, sync, import, doc, recent-docs, help
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from aictx import __version__
from aictx.config import ContextConfig, ensure_user_dirs, load_config
from aictx.core import ContextManager, StatusReport
from aictx.errors import ContextError

logger = logging.getLogger(__name__)

FORCE_FLAGS = ("-f", "--force")

USAGE = """\
Context Management System

Commands:
  context store <category> <content>    Store contextual information
  context retrieve [filter]             Retrieve stored context
  context status                        Show system status
  context sync                          Force provider synchronization
  context import                        Import existing AI files into memory
  context doc <file> [description]      Track a document with timestamp
  context recent-docs [days]            List recently modified docs
  context help                          Display this help

Options:
  -f, --force     Store even when the content looks like a secret

Categories:
  architecture    System design and architecture decisions
  requirements    Business and technical requirements
  implementation  Code implementation details
  infrastructure  Deployment and infrastructure setup
  decisions       Technical decisions and rationale
  issues          Known issues and resolutions
  docs            Documentation references with timestamps

Examples:
  context store architecture "Microservices with event sourcing"
  context store decisions "PostgreSQL for ACID compliance"
  context doc API.md "REST endpoint documentation"
  context recent-docs 14    # Show docs modified in last 14 days
  context retrieve "docs"   # Find all doc references
  context import            # Import existing CLAUDE.md, .cursorrules, etc.

Configuration stored in: ~/.config/context/
Data stored in: ~/.local/share/context/

Security Tips:
  - Don't store passwords/tokens directly - use references
  - .ai-context/ is auto-added to .gitignore
  - Good:  context store api "Using AWS API Gateway with auth"
  - Bad:   context store api "api_key=sk-abc123..."
  - Good:  context store secrets "DB creds in 1Password: Prod-DB"
"""


def _setup_logging(config: ContextConfig) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setLevel(getattr(logging, config.log_level.upper(), logging.WARNING))
    if config.security.audit_logging:
        audit = logging.FileHandler(config.audit_log, encoding="utf-8")
        audit.setLevel(logging.INFO)
        handlers.append(audit)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _prompt_confirm(message: str) -> bool:
    print(f"⚠️  {message}")
    reply = input("Continue anyway? (y/N) ")
    return reply.strip().lower() in ("y", "yes")


def _pop_force(args: list[str]) -> tuple[list[str], bool]:
    """Consume leading -f/--force flags; ``--`` ends option parsing."""
    force = False
    while args and args[0] in FORCE_FLAGS:
        args = args[1:]
        force = True
    if args and args[0] == "--":
        args = args[1:]
    return args, force


# ── Command handlers ─────────────────────────────────────────


def _cmd_store(manager: ContextManager, args: list[str]) -> int:
    args, force = _pop_force(args)
    if len(args) < 2:
        print("Usage: context store [-f] <category> <content>", file=sys.stderr)
        return 1
    entry = manager.store(args[0], args[1], force=force)
    print(f"✓ Stored [{entry.category}]: {entry.content}")
    return 0


def _cmd_doc(manager: ContextManager, args: list[str]) -> int:
    args, force = _pop_force(args)
    if not args:
        print("Usage: context doc <file> [description]", file=sys.stderr)
        return 1
    entry = manager.track_doc(args[0], args[1] if len(args) > 1 else None, force=force)
    print(f"✓ Stored [{entry.category}]: {entry.content}")
    return 0


def _cmd_recent_docs(manager: ContextManager, args: list[str]) -> int:
    days = args[0] if args else None
    docs = manager.recent_docs(days)
    print(f"Recent documentation (last {days or 7} days):")
    print("=" * 37)
    for doc in docs:
        print(f"  {doc.path:<40} {doc.modified}  {doc.size}")
    return 0


def _cmd_retrieve(manager: ContextManager, args: list[str]) -> int:
    result = manager.retrieve(args[0] if args else None)
    if result is None:
        print("No matches found.")
    else:
        print(result, end="" if result.endswith("\n") else "\n")
    return 0


def _render_status(report: StatusReport, config: ContextConfig) -> str:
    lines = [
        f"Context Management System v{__version__}",
        "=" * 32,
        "",
        f"Configuration: {config.config_dir}",
        f"Data Storage: {config.data_dir}",
        f"Cache: {config.cache_dir}",
        "",
    ]
    if not report.log_exists:
        lines.append("No context initialized in current project.")
        return "\n".join(lines)

    lines.append(f"Project Context: {report.entry_count} entries")
    lines += ["", "Provider Files:"]
    for name, present in report.providers.items():
        lines.append(f"  {'✓' if present else '✗'} {name}")
    lines += ["", "Security:"]
    if report.gitignored:
        lines.append(f"  ✓ {config.context_dir_name} in .gitignore")
    else:
        lines.append(f"  ⚠️  {config.context_dir_name} not in .gitignore")
    if report.secrets_suspected:
        lines.append("  ⚠️  Possible secrets detected in memory.md")
    else:
        lines.append("  ✓ No obvious secrets in memory.md")
    return "\n".join(lines)


def _cmd_status(manager: ContextManager, args: list[str]) -> int:
    print(_render_status(manager.status(), manager.config))
    return 0


def _cmd_sync(manager: ContextManager, args: list[str]) -> int:
    for result in manager.sync():
        line = f"  {result.provider}: {result.action.value}"
        print(f"{line} ({result.detail})" if result.detail else line)
    return 0


def _cmd_import(manager: ContextManager, args: list[str]) -> int:
    imported = manager.import_existing()
    if imported:
        print(f"✓ Imported {len(imported)} existing context files into memory.md")
        print("Original files will now reference the centralized context")
    else:
        print("No existing context files to import")
    manager.sync()
    return 0


COMMANDS = {
    "store": _cmd_store,
    "remember": _cmd_store,
    "doc": _cmd_doc,
    "track-doc": _cmd_doc,
    "recent-docs": _cmd_recent_docs,
    "retrieve": _cmd_retrieve,
    "recall": _cmd_retrieve,
    "status": _cmd_status,
    "sync": _cmd_sync,
    "import": _cmd_import,
}
HELP_COMMANDS = ("help", "--help", "-h")


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    cmd = args.pop(0) if args else "help"

    if cmd in HELP_COMMANDS:
        print(USAGE, end="")
        return 0

    handler = COMMANDS.get(cmd)
    if handler is None:
        print(f"Invalid command: {cmd}", file=sys.stderr)
        print('Run "context help" for usage information.', file=sys.stderr)
        return 1

    try:
        config = load_config()
        ensure_user_dirs(config)
        _setup_logging(config)
    except ContextError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: Cannot open audit log: {exc}", file=sys.stderr)
        return 1

    confirm = _prompt_confirm if sys.stdin.isatty() else None
    manager = ContextManager(config, Path.cwd(), confirm=confirm)
    try:
        return handler(manager, args)
    except ContextError as exc:
        logger.info("%s failed: %s", cmd, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
