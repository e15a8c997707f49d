"""Scan pipeline exceptions.

User-input problems subclass ValueError so HTTP handlers can keep treating
ValueError as a client error. Storage trouble is a RuntimeError: the operator
re-scans, nothing is retried automatically.
"""
from checkpoint.core.constants import (
    MSG_INVALID_TOKEN,
    MSG_SELECT_SESSION,
    MSG_SESSION_INACTIVE,
)


class ScanError(ValueError):
    """Expected, non-retryable rejection of a scan."""

    default_message = "Scan rejected"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TokenNotFound(ScanError):
    """No participant owns the scanned token."""

    default_message = MSG_INVALID_TOKEN


class SessionNotSelected(ScanError):
    """Food scan without a redemption session chosen."""

    default_message = MSG_SELECT_SESSION


class SessionInactive(ScanError):
    """Session key is unknown, switched off, or outside its time window."""

    default_message = MSG_SESSION_INACTIVE


class ScanInProgress(ScanError):
    """Station configuration change attempted while a scan is being processed."""

    default_message = "A scan is already being processed at this station"


class StorageError(RuntimeError):
    """A read or write against the record store failed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
