"""Input validation for entry text and identifier fields."""

from __future__ import annotations

import re

from aictx.errors import InvalidInput

MAX_INPUT_LENGTH = 2000
MAX_FIELD_LENGTH = 50
MAX_FILTER_LENGTH = 100

ALLOWED_CHARS = re.compile(r"^[a-zA-Z0-9 ._,/:@#-]+$")
FIELD_NAME = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")

# Advisory only: misses most real credential formats and flags innocent text.
SECRET_PATTERN = re.compile(r"(password|api_key|secret|token)\s*[:=]", re.IGNORECASE)
SENSITIVE_CATEGORIES = frozenset({"secrets", "credentials"})

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _sanitize(value: str) -> str:
    return _CONTROL_CHARS.sub("", value)


def validate_text(
    value: str,
    max_length: int = MAX_INPUT_LENGTH,
    pattern: re.Pattern[str] = ALLOWED_CHARS,
) -> str:
    """Strip control characters, then enforce length and character class.

    Returns the sanitized value.
    """
    value = _sanitize(value)
    if len(value) > max_length:
        raise InvalidInput(f"Input exceeds maximum length: {len(value)} > {max_length}")
    if not pattern.match(value):
        raise InvalidInput("Input contains invalid characters")
    return value


def validate_identifier(value: str) -> str:
    value = _sanitize(value)
    if len(value) > MAX_FIELD_LENGTH:
        raise InvalidInput(f"Field name too long: {len(value)} > {MAX_FIELD_LENGTH}")
    if not FIELD_NAME.match(value):
        raise InvalidInput(f"Invalid field name format: {value}")
    return value


def looks_like_secret(text: str) -> bool:
    return SECRET_PATTERN.search(text) is not None


def is_sensitive_category(category: str) -> bool:
    return category in SENSITIVE_CATEGORIES
