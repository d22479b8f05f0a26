"""
Request execution against the bucket-scoped file API.

Every data call goes through ``RequestExecutor.execute``, which attaches the
session token, re-logs in once on a 401 and interprets the response. The
retry is a loop bounded to two attempts.
"""

from __future__ import annotations

import json
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import requests
from loguru import logger

from .content import ContentItem, build_form, rewind
from .errors import RequestError
from .session import SessionManager
from .transport import send

FILE_API_PREFIX = "/api/v2/file"
MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class RequestOutcome:
    """Result of a successful call: decoded or raw body plus response headers."""
    body: Any
    headers: Dict[str, str] = field(default_factory=dict)
    status_code: int = 200


class RequestExecutor:
    """Issues HTTP calls using SessionManager state."""

    def __init__(self, sessions: SessionManager, http: requests.Session):
        self.sessions = sessions
        self.http = http

    def _url(self, path: str) -> str:
        return f"{self.sessions.config.base_url}/{path.lstrip('/')}"

    def _file_path(self, target_path: str) -> str:
        bucket = quote(self.sessions.bucket or "", safe="")
        return f"{FILE_API_PREFIX}/{bucket}/{quote(target_path.lstrip('/'), safe='/')}"

    def execute(
        self,
        method: str,
        path: str,
        allow_retry: bool = True,
        decode_json: bool = True,
        **options: Any,
    ) -> RequestOutcome:
        """
        Perform one logical HTTP operation with at most one re-login.

        Args:
            method: HTTP verb
            path: Path relative to the base URL
            allow_retry: Re-login and resend once on a 401
            decode_json: Parse the body as JSON, falling back to raw text
            **options: Passed to ``requests`` (headers, data, files, ...)

        Returns:
            RequestOutcome

        Raises:
            TransportError: if no response was obtained
            RequestError: on a non-2xx status, including a repeated 401
        """
        url = self._url(path)
        attempts = MAX_ATTEMPTS if allow_retry else 1
        extra_cookies = options.pop("cookies", None) or {}

        for attempt in range(1, attempts + 1):
            token = self.sessions.token
            session_cookies = {self.sessions.config.cookie_name: token} if token else {}
            if attempt > 1:
                rewind(options.get("files"))
            response = send(
                self.http,
                method,
                url,
                self.sessions.config.timeout,
                cookies={**extra_cookies, **session_cookies},
                **options,
            )
            if response.status_code == 401 and attempt < attempts:
                logger.warning(f"401 for {method.upper()} {path}; logging in again and retrying once")
                self.sessions.refresh(token)
                continue
            break

        return self._interpret(response, decode_json)

    @staticmethod
    def _interpret(response: requests.Response, decode_json: bool) -> RequestOutcome:
        status = response.status_code
        headers = dict(response.headers)

        if status < 200 or status >= 300:
            raise RequestError(status, response.text)

        if not decode_json:
            return RequestOutcome(body=response.content, headers=headers, status_code=status)

        text = response.text
        try:
            body = json.loads(text)
        except ValueError:
            body = text
        return RequestOutcome(body=body, headers=headers, status_code=status)

    def get_file(self, target_path: str) -> RequestOutcome:
        """
        Download a stored object.

        Args:
            target_path: Object path within the selected bucket

        Returns:
            RequestOutcome whose body is the raw bytes

        Raises:
            PreconditionError: if not logged in or no bucket is selected
        """
        self.sessions.ensure_ready()
        outcome = self.execute(
            "GET",
            self._file_path(target_path),
            decode_json=False,
            headers={"Accept": "*/*"},
        )
        logger.info(f"Fetched {self.sessions.bucket}/{target_path} ({len(outcome.body)} bytes)")
        return outcome

    def upload_content_list(
        self,
        target_path: str,
        items: Sequence[ContentItem],
        mime_type: Optional[str] = None,
        request_url: bool = False,
        decode_json: bool = True,
    ) -> RequestOutcome:
        """
        Upload one or more content items as a single multipart PUT.

        Args:
            target_path: Object path within the selected bucket
            items: Content items, sent in the given order
            mime_type: Declared content type of the stored object
            request_url: Ask the service to return a public URL
            decode_json: Parse the response body as JSON when possible

        Returns:
            RequestOutcome describing the stored object

        Raises:
            PreconditionError: if not logged in or no bucket is selected
            ValueError: if ``items`` is empty
        """
        self.sessions.ensure_ready()
        if not items:
            raise ValueError("At least one content item is required")

        with ExitStack() as stack:
            parts = build_form(items, stack, mime_type=mime_type, request_url=request_url)
            outcome = self.execute(
                "PUT",
                self._file_path(target_path),
                decode_json=decode_json,
                files=parts,
                headers={"Accept": "application/json"},
            )
        logger.info(f"Uploaded {len(items)} item(s) to {self.sessions.bucket}/{target_path}")
        return outcome
