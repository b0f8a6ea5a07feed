"""Optional external collaborators: version control and file metadata.

Each one degrades to a fixed fallback when the underlying tool or file is
unavailable, so callers never need to special-case their absence.
"""
