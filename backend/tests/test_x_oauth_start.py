"""Tests for GET /auth/x."""
import base64
import hashlib
from urllib.parse import parse_qs, urlparse

from conftest import body_of, make_event
from handlers import x_oauth_start
from lib.oauth_state import find_oauth_state, get_oauth_state


def _query(url):
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def _stored_state(tables, user_id):
    return tables["oauth-states"].items[(f"user#{user_id}", "oauth_state#x")]


def test_requires_session():
    response = x_oauth_start.handler(make_event(), None)

    assert response["statusCode"] == 401
    assert body_of(response) == {"error": "Unauthorized"}


def test_returns_authorization_url_with_pkce_params(tables):
    response = x_oauth_start.handler(make_event(user_id="user-1"), None)

    assert response["statusCode"] == 200
    url = body_of(response)["url"]
    assert url.startswith("https://twitter.com/i/oauth2/authorize?")

    params = _query(url)
    assert params["response_type"] == "code"
    assert params["client_id"] == "x-client-id"
    assert params["redirect_uri"] == "https://snip.example.com/api/auth/x/callback"
    assert params["scope"] == "tweet.read tweet.write users.read offline.access"
    assert params["code_challenge_method"] == "S256"

    stored = _stored_state(tables, "user-1")
    assert params["state"] == stored["state"]
    assert len(stored["state"]) == 32
    int(stored["state"], 16)
    assert stored["provider"] == "x"
    assert stored["user_id"] == "user-1"


def test_code_challenge_is_sha256_of_stored_verifier(tables):
    response = x_oauth_start.handler(make_event(user_id="user-1"), None)
    params = _query(body_of(response)["url"])
    verifier = _stored_state(tables, "user-1")["code_verifier"]

    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).decode().rstrip("=")
    assert params["code_challenge"] == expected
    # 32 random bytes, unpadded base64url
    assert len(verifier) == 43
    assert verifier not in response["body"]


def test_reinitiating_overwrites_pending_state(tables):
    first = _query(body_of(x_oauth_start.handler(make_event(user_id="user-1"), None))["url"])["state"]
    second = _query(body_of(x_oauth_start.handler(make_event(user_id="user-1"), None))["url"])["state"]

    assert first != second
    assert set(tables["oauth-states"].items) == {
        ("user#user-1", "oauth_state#x"),
        (f"oauth_state#{second}", "x"),
    }
    assert get_oauth_state("user-1", "x", first) is None
    assert find_oauth_state("x", first) is None
    assert get_oauth_state("user-1", "x", second).state == second
    assert find_oauth_state("x", second).user_id == "user-1"


def test_redirect_uri_falls_back_to_localhost(monkeypatch):
    monkeypatch.delenv("APP_URL")

    response = x_oauth_start.handler(make_event(user_id="user-1"), None)

    params = _query(body_of(response)["url"])
    assert params["redirect_uri"] == "http://localhost:3000/api/auth/x/callback"


def test_persistence_failure_is_generic_500(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("table offline: arn:aws:dynamodb:secret")

    monkeypatch.setattr(x_oauth_start, "create_oauth_state", boom)

    response = x_oauth_start.handler(make_event(user_id="user-1"), None)

    assert response["statusCode"] == 500
    assert body_of(response) == {"error": "Failed to initialize OAuth"}
