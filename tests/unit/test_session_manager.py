import pytest
import requests

from filestore import AuthenticationError, PreconditionError, ProtocolError, TransportError
from filestore.session import Session


def test_login_stores_token_from_cookie(client, fake_http):
    fake_http.add_login("tok-1")

    assert client.login() == "tok-1"
    assert client.session_token == "tok-1"
    assert fake_http.paths() == ["/api/auth/csrf", "/api/auth/callback/credentials"]

    post = fake_http.calls[1]
    assert post["data"] == {"csrfToken": "csrf-1", "token": "key-123"}
    assert post["headers"]["Accept"] == "application/json"


def test_login_reads_cookie_set_on_redirect(client, fake_http):
    """The service may set the session cookie on a redirect the transport followed."""
    from conftest import FakeResponse

    redirect = FakeResponse(302, cookies={"jwt_token": "tok-redirect"})
    fake_http.add("GET", "/api/auth/csrf", body={"csrfToken": "csrf-1"})
    fake_http.add("POST", "/api/auth/callback/credentials", history=[redirect])

    assert client.login() == "tok-redirect"


def test_login_without_csrf_token_raises_protocol_error(client, fake_http):
    fake_http.add("GET", "/api/auth/csrf", body={"other": 1})

    with pytest.raises(ProtocolError, match="CSRF token not found"):
        client.login()
    assert fake_http.paths() == ["/api/auth/csrf"]


def test_login_with_non_json_csrf_body_raises_protocol_error(client, fake_http):
    fake_http.add("GET", "/api/auth/csrf", status=502, body="<html>bad gateway</html>")

    with pytest.raises(ProtocolError, match="HTTP 502"):
        client.login()


def test_invalid_key_leaves_client_unauthenticated(client, fake_http):
    fake_http.add_login(token=None)

    with pytest.raises(AuthenticationError, match="jwt_token cookie not found"):
        client.login()
    assert client.session_token is None

    client.set_bucket("b")
    calls_before = len(fake_http.calls)
    with pytest.raises(PreconditionError, match="Not authenticated"):
        client.get_file("p")
    assert len(fake_http.calls) == calls_before


def test_failed_login_ignores_stale_cookie_in_jar(client, fake_http):
    fake_http.cookies.set("jwt_token", "old-token")
    fake_http.add_login(token=None)

    with pytest.raises(AuthenticationError):
        client.login()
    assert client.session_token is None


def test_login_transport_failure(client, fake_http):
    fake_http.add("GET", "/api/auth/csrf", body=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(TransportError, match="refused"):
        client.login()


def test_ensure_ready_requires_bucket(client, fake_http):
    fake_http.add_login("tok-1")
    client.login()

    with pytest.raises(PreconditionError, match="No bucket set"):
        client.sessions.ensure_ready()

    client.set_bucket("b")
    client.sessions.ensure_ready()


def test_bucket_from_config_is_preselected(config, fake_http):
    from filestore import FileStoreClient, FileStoreConfig

    cfg = FileStoreConfig(base_url=config.base_url, api_key="k", bucket="preset")
    assert FileStoreClient(cfg, http=fake_http).bucket == "preset"


def test_refresh_skips_login_when_token_already_replaced(ready_client, fake_http):
    sessions = ready_client.sessions

    # A concurrent caller already swapped tok-1 for a fresh token
    sessions.session.session_token = "tok-fresh"
    assert sessions.refresh("tok-1") == "tok-fresh"
    assert fake_http.login_count() == 0


def test_refresh_logs_in_when_token_is_stale(ready_client, fake_http):
    fake_http.add_login("tok-2")

    assert ready_client.sessions.refresh("tok-1") == "tok-2"
    assert fake_http.login_count() == 1



def test_session_is_authenticated():
    assert not Session().is_authenticated
    assert Session(session_token="t").is_authenticated
