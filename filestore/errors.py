"""
Exception hierarchy for the file store client.

Every error raised by the client derives from FileStoreError so callers can
catch one type at the boundary.
"""

from typing import Optional


class FileStoreError(Exception):
    """Base exception for file store client errors."""
    pass


class ConfigurationError(FileStoreError):
    """Raised when required client configuration is missing."""
    pass


class ProtocolError(FileStoreError):
    """Raised when a response lacks a field the protocol requires."""
    pass


class AuthenticationError(FileStoreError):
    """Raised when the credential exchange yields no session token."""
    pass


class PreconditionError(FileStoreError):
    """Raised when a data call is made before login or bucket selection."""
    pass


class TransportError(FileStoreError):
    """Raised when no response could be obtained (connection error, timeout)."""
    pass


class RequestError(FileStoreError):
    """
    Raised when the service answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the failed response
        body: Best-effort text of the response body
    """

    def __init__(self, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body or ""
        super().__init__(f"Request failed with status {status_code}: {self.body[:200]}")
