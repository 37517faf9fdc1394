"""Input validators for the store connection questions."""

from __future__ import annotations

import re
from typing import Any, Final

_URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://")

MIN_PORT: Final[int] = 1025
MAX_PORT: Final[int] = 65535


def validate_store_url(value: Any) -> str | None:
    """Return an error message unless the value looks like an HTTP(S) URL.

    Args:
        value: Raw answer supplied by the user.

    Returns:
        None when valid, otherwise the message to display.
    """
    if isinstance(value, str) and _URL_PATTERN.match(value):
        return None
    return "You must enter a URL"


def validate_port(value: Any) -> str | None:
    """Return an error message unless the value is a port in [1025, 65535].

    Args:
        value: Raw answer supplied by the user, usually a string.

    Returns:
        None when valid, otherwise the message to display.
    """
    try:
        port = int(str(value).strip())
    except ValueError:
        return "You must enter an integer"
    if port < MIN_PORT or port > MAX_PORT:
        return f"The port number must be between {MIN_PORT} and {MAX_PORT}"
    return None


def validate_username(value: Any) -> str | None:
    """Reject blank usernames."""
    if not value or not str(value).strip():
        return "You must enter a username"
    return None


def validate_token(value: Any) -> str | None:
    """Reject blank tokens."""
    if not value or not str(value).strip():
        return "Please enter a valid token"
    return None
