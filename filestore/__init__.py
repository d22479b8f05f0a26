"""Client library for the bucket-scoped file storage HTTP service."""

from .client import FileStoreClient, get_client
from .config import FileStoreConfig
from .content import ContentItem
from .errors import (
    AuthenticationError,
    ConfigurationError,
    FileStoreError,
    PreconditionError,
    ProtocolError,
    RequestError,
    TransportError,
)
from .executor import RequestExecutor, RequestOutcome
from .session import Session, SessionManager

__version__ = "0.1.0"

__all__ = [
    "FileStoreClient",
    "get_client",
    "FileStoreConfig",
    "ContentItem",
    "Session",
    "SessionManager",
    "RequestExecutor",
    "RequestOutcome",
    "FileStoreError",
    "ConfigurationError",
    "ProtocolError",
    "AuthenticationError",
    "PreconditionError",
    "TransportError",
    "RequestError",
]
