"""
Shared fixtures: a scripted stand-in for ``requests.Session`` and ready-made
clients built on it.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import json
from collections import defaultdict
from typing import Any, Dict, List, Optional

import pytest
from requests.cookies import RequestsCookieJar, cookiejar_from_dict
from requests.structures import CaseInsensitiveDict

from filestore import FileStoreClient, FileStoreConfig

BASE_URL = "https://files.example.test"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None,
        history: Optional[List["FakeResponse"]] = None,
    ):
        self.status_code = status_code
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})
        self.cookies = cookiejar_from_dict(cookies or {})
        self.history = history or []

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.text)


class FakeHttp:
    """
    Scripted HTTP session.

    Responses are queued per (METHOD, path); the last queued response for a
    route is reused once the queue drains. Queued exceptions are raised.
    """

    def __init__(self):
        self.routes = defaultdict(list)
        self.calls: List[Dict[str, Any]] = []
        self.cookies = RequestsCookieJar()
        self.closed = False

    def add(self, method: str, path: str, status: int = 200, body: Any = b"", **kwargs) -> None:
        if isinstance(body, BaseException):
            self.routes[(method, path)].append(body)
            return
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[(method, path)].append(FakeResponse(status, body, **kwargs))

    def add_login(self, token: Optional[str] = "tok-1", csrf: Optional[str] = "csrf-1") -> None:
        self.add("GET", "/api/auth/csrf", body={"csrfToken": csrf} if csrf else {})
        self.add(
            "POST",
            "/api/auth/callback/credentials",
            cookies={"jwt_token": token} if token else None,
        )

    def request(self, method: str, url: str, **kwargs):
        assert url.startswith(BASE_URL), url
        path = url[len(BASE_URL):]
        files = kwargs.get("files") or []
        sent_files = [
            (name, (filename, value.read() if hasattr(value, "read") else value))
            for name, (filename, value) in files
        ]
        self.calls.append({**kwargs, "method": method, "path": path, "files": sent_files})

        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        return result

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [c["path"] for c in self.calls if method is None or c["method"] == method]

    def login_count(self) -> int:
        return self.paths("POST").count("/api/auth/callback/credentials")

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_http():
    return FakeHttp()


@pytest.fixture()
def config():
    return FileStoreConfig(base_url=BASE_URL + "/", api_key="key-123")


@pytest.fixture()
def client(config, fake_http):
    return FileStoreClient(config, http=fake_http)


@pytest.fixture()
def ready_client(client, fake_http):
    """Client that has logged in (token tok-1) and selected bucket ``b``."""
    fake_http.add_login("tok-1")
    client.login()
    client.set_bucket("b")
    fake_http.calls.clear()
    fake_http.routes.clear()
    return client
