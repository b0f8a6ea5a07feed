"""Project memory log, input validation and document tracking.

Layout inside a project:
    <project>/
    ├── .ai-context/
    │   └── memory.md                  # Append-style log of categorized entries
    ├── CLAUDE.md                      # Provider files referencing the log
    ├── .cursorrules
    ├── .github/copilot-instructions.md
    └── GEMINI.md -> .ai-context/memory.md
"""
