"""Input sanitization utilities."""
import re
import unicodedata
from typing import Optional

from checkpoint.core.constants import (
    MAX_SESSION_KEY_LENGTH,
    MAX_STAFF_ID_LENGTH,
    MAX_STATION_ID_LENGTH,
    MAX_TOKEN_LENGTH,
)


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize free text input.

    Strips HTML tags and normalizes whitespace. Output is not HTML-escaped;
    escaping is the job of whatever renders it.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_scanned_token(token: str) -> str:
    """
    Normalize a token decoded from a badge.

    Tokens are opaque: no format is assumed. Only Unicode normalization,
    surrounding whitespace removal and a non-empty check are applied, so
    lookups stay an exact match against the stored token.

    Raises:
        ValueError: If the token is not a string, empty, or too long
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    normalized = unicodedata.normalize("NFC", token).strip()

    if not normalized:
        raise ValueError("Token cannot be empty")

    if len(normalized) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    return normalized


def sanitize_session_key(session_key: str) -> str:
    """
    Validate a redemption session key such as ``LUNCH_DAY1``.

    Keys are matched exactly, so case is preserved.

    Raises:
        ValueError: If the key is empty, too long, or has invalid characters
    """
    if not isinstance(session_key, str):
        raise ValueError("Session key must be a string")

    sanitized = session_key.strip()

    if not sanitized:
        raise ValueError("Session key cannot be empty")

    if len(sanitized) > MAX_SESSION_KEY_LENGTH:
        raise ValueError(f"Session key exceeds maximum length of {MAX_SESSION_KEY_LENGTH} characters")

    if not re.match(r'^[A-Za-z0-9_-]+$', sanitized):
        raise ValueError("Session key can only contain letters, numbers, underscores, and hyphens")

    return sanitized


def sanitize_station_id(station_id: str) -> str:
    """Validate a scanner station identifier."""
    sanitized = sanitize_text(station_id, max_length=MAX_STATION_ID_LENGTH)

    if not sanitized:
        raise ValueError("Station id cannot be empty")

    if not re.match(r'^[A-Za-z0-9_.-]+$', sanitized):
        raise ValueError("Station id can only contain letters, numbers, dots, underscores, and hyphens")

    return sanitized


def normalize_staff_id(staff_id: Optional[str]) -> Optional[str]:
    """
    Normalize the acting staff id supplied by the identity layer.

    Blank values mean an unattended scan and become None.
    """
    if staff_id is None:
        return None

    sanitized = sanitize_text(staff_id, max_length=MAX_STAFF_ID_LENGTH)
    return sanitized or None


def mask_token(token: str, visible: int) -> str:
    """Shorten a token for log output."""
    if not token:
        return ""
    if len(token) <= visible:
        return "*" * len(token)
    return f"{token[:visible]}..."
