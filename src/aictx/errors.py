"""Error taxonomy surfaced to the operator as a message and exit status 1."""

from __future__ import annotations


class ContextError(Exception):
    """Base class for every failure the CLI reports."""


class InvalidInput(ContextError):
    """Length or character-class violation."""


class SecretDetected(ContextError):
    """Secret heuristic matched and the store was not confirmed."""


class NotFound(ContextError):
    """A required file (the log, a tracked document) does not exist."""


class IOFailure(ContextError):
    """Directory creation, atomic write or link creation failed."""
