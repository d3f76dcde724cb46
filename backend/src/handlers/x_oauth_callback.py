"""Handle X OAuth callback and store the social connection."""

import json
import logging

from lib.oauth_state import delete_oauth_state, find_oauth_state
from lib.response import redirect_response
from lib.social_connections import store_connection
from lib.x_oauth import X_PROVIDER, XOAuthError, app_url, exchange_code_for_tokens, fetch_user

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def _redirect(path: str):
    return redirect_response(f"{app_url()}{path}")


def handler(event, context):
    params = event.get("queryStringParameters") or {}
    code = params.get("code")
    state = params.get("state")
    error = params.get("error")

    if error:
        logger.warning(json.dumps({"action": "x_oauth_denied", "error": error}))
        return _redirect("/?error=x_auth_denied")

    if not code or not state:
        return _redirect("/?error=x_auth_invalid")

    try:
        # The browser returns from X without an API session; the user comes
        # from the pending state record.
        oauth_state = find_oauth_state(X_PROVIDER, state)
        if not oauth_state:
            return _redirect("/?error=x_auth_invalid_state")
        user_id = oauth_state.user_id

        try:
            tokens = exchange_code_for_tokens(code, oauth_state.code_verifier)
        except XOAuthError as exc:
            logger.error(f"X token error: {exc}")
            return _redirect("/?error=x_auth_token_failed")

        profile = fetch_user(tokens["access_token"])
        connection = store_connection(user_id, X_PROVIDER, tokens, profile)
        delete_oauth_state(user_id, X_PROVIDER)
    except Exception:
        logger.error("X OAuth callback error", exc_info=True)
        return _redirect("/?error=x_auth_failed")

    logger.info(json.dumps({
        "action": "x_oauth_connected",
        "user_id": user_id,
        "provider_username": connection.provider_username,
    }))
    return _redirect(f"/?social_connected={X_PROVIDER}")
