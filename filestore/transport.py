"""
HTTP transport helpers shared by the session manager and request executor.

The transport never retries on its own: the only retry in the client is the
single re-login after a 401, which lives in the executor.
"""

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from loguru import logger

from .errors import TransportError


def create_session(pool_size: int = 10) -> requests.Session:
    """Create a requests session with transport-level retries disabled."""
    session = requests.Session()

    retry_strategy = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


def send(http: requests.Session, method: str, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """
    Issue one HTTP request.

    Non-2xx statuses are returned to the caller, not raised.

    Args:
        http: Session to send through
        method: HTTP verb
        url: Absolute request URL
        timeout: Overall request deadline in seconds
        **kwargs: Passed to ``requests.Session.request``

    Returns:
        Response object

    Raises:
        TransportError: if no response was obtained
    """
    logger.debug(f"HTTP {method.upper()} begin: {url}")
    try:
        response = http.request(method.upper(), url, timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as e:
        logger.error(f"HTTP {method.upper()} failed for {url}: {e}")
        raise TransportError(f"Request failed: {e}") from e
    logger.debug(f"HTTP {method.upper()} status: {response.status_code} for {url}")
    return response
