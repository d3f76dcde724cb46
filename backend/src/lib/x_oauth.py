"""X (Twitter) OAuth 2.0 helpers."""

import os
from urllib.parse import urlencode

import requests

X_AUTH_URL = "https://twitter.com/i/oauth2/authorize"
X_TOKEN_URL = "https://api.twitter.com/2/oauth2/token"
X_USER_URL = "https://api.twitter.com/2/users/me"

X_PROVIDER = "x"
X_SCOPE = "tweet.read tweet.write users.read offline.access"
X_CALLBACK_PATH = "/api/auth/x/callback"
DEFAULT_APP_URL = "http://localhost:3000"


class XOAuthError(ValueError):
    """Raised when X OAuth fails."""


def app_url() -> str:
    return (os.environ.get("APP_URL") or DEFAULT_APP_URL).rstrip("/")


def redirect_uri() -> str:
    return f"{app_url()}{X_CALLBACK_PATH}"


def build_authorization_url(state: str, code_challenge: str) -> str:
    query = urlencode(
        {
            "response_type": "code",
            "client_id": os.environ.get("X_CLIENT_ID", ""),
            "redirect_uri": redirect_uri(),
            "scope": X_SCOPE,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
    )
    return f"{X_AUTH_URL}?{query}"


def exchange_code_for_tokens(code: str, code_verifier: str) -> dict:
    """Exchange an authorization code for tokens using PKCE."""
    client_id = os.environ.get("X_CLIENT_ID")
    client_secret = os.environ.get("X_CLIENT_SECRET")

    if not client_id:
        raise XOAuthError("X_CLIENT_ID is not configured")
    if not client_secret:
        raise XOAuthError("X_CLIENT_SECRET is not configured")

    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri(),
        "code_verifier": code_verifier,
    }

    try:
        response = requests.post(
            X_TOKEN_URL,
            data=data,
            auth=(client_id, client_secret),
            timeout=15,
        )
    except requests.RequestException as exc:
        raise XOAuthError(f"X OAuth request failed: {exc}") from exc

    if response.status_code != 200:
        raise XOAuthError(f"X OAuth failed: HTTP {response.status_code}")

    payload = response.json()
    if "error" in payload or not payload.get("access_token"):
        error = payload.get("error_description") or payload.get("error") or "missing access_token"
        raise XOAuthError(f"X OAuth failed: {error}")

    return payload


def fetch_user(access_token: str) -> dict | None:
    """Return the X user profile ({id, username, ...}) or None on failure."""
    try:
        response = requests.get(
            X_USER_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=10,
        )
    except requests.RequestException:
        return None
    if response.status_code != 200:
        return None
    return (response.json() or {}).get("data")
