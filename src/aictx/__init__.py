"""aictx — per-project AI context log with provider file synchronization."""

__version__ = "2.0.0"
