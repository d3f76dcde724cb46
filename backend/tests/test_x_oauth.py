"""Tests for the X OAuth client helpers."""
import pytest
import requests

from lib import x_oauth
from lib.oauth_state import code_challenge_for, create_oauth_state, get_oauth_state


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def test_code_challenge_known_vector():
    verifier = "snip-pkce-verifier-0123456789abcdefghijklmnop"

    assert code_challenge_for(verifier) == "sH4qSTFMMEsjcLQudSikwVlnslCeQr9VF-wUkVvi6No"


def test_exchange_uses_basic_auth_and_verifier(monkeypatch):
    seen = {}

    def fake_post(url, data=None, auth=None, timeout=None):
        seen.update(url=url, data=data, auth=auth)
        return FakeResponse(200, {"access_token": "at", "refresh_token": "rt", "expires_in": 60})

    monkeypatch.setattr(x_oauth.requests, "post", fake_post)

    tokens = x_oauth.exchange_code_for_tokens("code-1", "verifier-1")

    assert tokens["access_token"] == "at"
    assert seen["url"] == x_oauth.X_TOKEN_URL
    assert seen["auth"] == ("x-client-id", "x-client-secret")
    assert seen["data"] == {
        "grant_type": "authorization_code",
        "code": "code-1",
        "redirect_uri": "https://snip.example.com/api/auth/x/callback",
        "code_verifier": "verifier-1",
    }


def test_exchange_rejects_http_error(monkeypatch):
    monkeypatch.setattr(x_oauth.requests, "post", lambda *a, **kw: FakeResponse(400, {"error": "invalid_request"}))

    with pytest.raises(x_oauth.XOAuthError, match="HTTP 400"):
        x_oauth.exchange_code_for_tokens("code-1", "verifier-1")


def test_exchange_wraps_transport_errors(monkeypatch):
    def down(*args, **kwargs):
        raise requests.ConnectionError("dns")

    monkeypatch.setattr(x_oauth.requests, "post", down)

    with pytest.raises(x_oauth.XOAuthError, match="request failed"):
        x_oauth.exchange_code_for_tokens("code-1", "verifier-1")


def test_exchange_requires_secret(monkeypatch):
    monkeypatch.delenv("X_CLIENT_SECRET")

    with pytest.raises(x_oauth.XOAuthError, match="X_CLIENT_SECRET"):
        x_oauth.exchange_code_for_tokens("code-1", "verifier-1")


def test_fetch_user_returns_profile(monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        assert headers == {"Authorization": "Bearer at"}
        return FakeResponse(200, {"data": {"id": "42", "username": "snipper"}})

    monkeypatch.setattr(x_oauth.requests, "get", fake_get)

    assert x_oauth.fetch_user("at") == {"id": "42", "username": "snipper"}


def test_fetch_user_tolerates_failure(monkeypatch):
    monkeypatch.setattr(x_oauth.requests, "get", lambda *a, **kw: FakeResponse(401, {}))

    assert x_oauth.fetch_user("at") is None


def test_expired_state_is_rejected(tables):
    pending = create_oauth_state("user-1", "x")
    tables["oauth-states"].items[("user#user-1", "oauth_state#x")]["ttl"] = 1

    assert get_oauth_state("user-1", "x", pending.state) is None
