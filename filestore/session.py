"""
Session state and the login handshake.

Login is a two-step exchange against the service's auth endpoints:

1. GET /api/auth/csrf returns a one-time anti-forgery token
2. POST /api/auth/callback/credentials with that token and the API key; the
   service answers by setting the session cookie (``jwt_token``)

The token is read from the cookies of the login response itself (including
any redirects it followed) and stored on an explicit Session object. Data
requests attach it as a cookie per request.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

import requests
from loguru import logger

from .config import FileStoreConfig
from .errors import AuthenticationError, PreconditionError, ProtocolError
from .transport import send

CSRF_PATH = "/api/auth/csrf"
CREDENTIALS_PATH = "/api/auth/callback/credentials"


@dataclass
class Session:
    """Authentication state for one client instance."""
    session_token: Optional[str] = None
    bucket: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.session_token)


def _find_cookie(response: requests.Response, name: str) -> Optional[str]:
    """Return cookie ``name`` set by ``response`` or by any redirect it followed."""
    for resp in [*response.history, response]:
        value = resp.cookies.get(name)
        if value:
            return value
    return None


class SessionManager:
    """
    Owns the session token and selected bucket.

    Shared state is guarded by a lock; re-logins triggered by concurrent
    401s collapse into one credential exchange through ``refresh()``.
    """

    def __init__(self, config: FileStoreConfig, http: requests.Session):
        """
        Initialize session manager.

        Args:
            config: Client configuration (base URL, API key, cookie name)
            http: Shared requests session
        """
        self.config = config
        self.http = http
        self.session = Session(bucket=config.bucket)
        self._state_lock = threading.Lock()
        self._login_lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        with self._state_lock:
            return self.session.session_token

    @property
    def bucket(self) -> Optional[str]:
        with self._state_lock:
            return self.session.bucket

    def login(self) -> str:
        """
        Exchange the API key for a session token.

        Returns:
            The new session token

        Raises:
            ProtocolError: if the anti-forgery token is missing
            AuthenticationError: if no session cookie was set
            TransportError: if either request got no response
        """
        base = self.config.base_url
        timeout = self.config.timeout

        csrf_resp = send(self.http, "GET", f"{base}{CSRF_PATH}", timeout)
        try:
            csrf_token = (csrf_resp.json() or {}).get("csrfToken")
        except (ValueError, AttributeError):
            csrf_token = None
        if not csrf_token:
            raise ProtocolError(
                f"CSRF token not found in response (HTTP {csrf_resp.status_code})"
            )

        login_resp = send(
            self.http,
            "POST",
            f"{base}{CREDENTIALS_PATH}",
            timeout,
            data={"csrfToken": csrf_token, "token": self.config.api_key},
            headers={"Accept": "application/json"},
        )

        token = _find_cookie(login_resp, self.config.cookie_name)
        if not token:
            logger.warning(
                f"Login rejected by {base}: no {self.config.cookie_name} cookie "
                f"(HTTP {login_resp.status_code})"
            )
            raise AuthenticationError(f"{self.config.cookie_name} cookie not found after login")

        with self._state_lock:
            self.session.session_token = token
        logger.info(f"Logged in to {base}")
        return token

    def refresh(self, stale_token: Optional[str]) -> str:
        """
        Re-login after ``stale_token`` was rejected.

        If another caller already replaced the stale token, that token is
        returned without a second credential exchange.

        Args:
            stale_token: Token the failed request was sent with

        Returns:
            Current session token
        """
        with self._login_lock:
            current = self.token
            if current and current != stale_token:
                logger.debug("Session already refreshed by a concurrent call")
                return current
            return self.login()

    def set_bucket(self, name: str) -> None:
        """Select the bucket data operations address."""
        with self._state_lock:
            self.session.bucket = name
        logger.debug(f"Bucket set to {name}")

    def ensure_ready(self) -> None:
        """
        Check a data operation may proceed.

        Raises:
            PreconditionError: if not logged in or no bucket is selected
        """
        with self._state_lock:
            if not self.session.session_token:
                raise PreconditionError("Not authenticated. Please login first.")
            if not self.session.bucket:
                raise PreconditionError("No bucket set. Please select bucket first.")
