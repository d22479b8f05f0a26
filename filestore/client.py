"""
File store client facade.

Wires one requests session, a SessionManager and a RequestExecutor together.

Example:
    client = get_client()
    client.login()
    client.set_bucket("reports")
    result = client.upload_content_list(
        "2024/q1.pdf", [ContentItem.file("q1.pdf")], "application/pdf", request_url=True
    )
    data = client.get_file("2024/q1.pdf").body
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

from loguru import logger

from .config import FileStoreConfig
from .content import ContentItem, coerce_items
from .executor import RequestExecutor, RequestOutcome
from .session import SessionManager
from .transport import create_session


class FileStoreClient:
    """Client for the bucket-scoped file storage API."""

    def __init__(self, config: FileStoreConfig, http=None):
        """
        Initialize client.

        Args:
            config: Connection settings
            http: Optional pre-built requests session (tests inject fakes here)
        """
        self.config = config
        self.http = http if http is not None else create_session()
        self.sessions = SessionManager(config, self.http)
        self.executor = RequestExecutor(self.sessions, self.http)

        logger.info(f"FileStoreClient initialized: {config.base_url}")

    @property
    def session_token(self) -> Optional[str]:
        return self.sessions.token

    @property
    def bucket(self) -> Optional[str]:
        return self.sessions.bucket

    def login(self) -> str:
        return self.sessions.login()

    def set_bucket(self, name: str) -> None:
        self.sessions.set_bucket(name)

    def get_file(self, target_path: str) -> RequestOutcome:
        return self.executor.get_file(target_path)

    def upload_content_list(
        self,
        target_path: str,
        items: Sequence[Union[ContentItem, Dict[str, Any]]],
        mime_type: Optional[str] = None,
        request_url: bool = False,
        decode_json: bool = True,
    ) -> RequestOutcome:
        """
        Upload content items to ``target_path`` in the selected bucket.

        Items may be ContentItem objects or ``{"type": ..., "value": ...}`` dicts.
        """
        return self.executor.upload_content_list(
            target_path,
            coerce_items(items),
            mime_type=mime_type,
            request_url=request_url,
            decode_json=decode_json,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "FileStoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def get_client(**overrides) -> FileStoreClient:
    """Factory function to create a client from the environment."""
    return FileStoreClient(FileStoreConfig.from_env(**overrides))
