"""Start X OAuth (PKCE) flow by returning an authorization URL."""

import json
import logging

from lib.auth import get_current_user
from lib.oauth_state import code_challenge_for, create_oauth_state
from lib.response import api_response, error_response
from lib.x_oauth import X_PROVIDER, build_authorization_url

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def handler(event, context):
    user_id = get_current_user(event)
    if not user_id:
        return error_response(401, "Unauthorized")

    try:
        oauth_state = create_oauth_state(user_id, X_PROVIDER)
        auth_url = build_authorization_url(
            oauth_state.state,
            code_challenge_for(oauth_state.code_verifier),
        )
    except Exception:
        logger.error("X OAuth init error", exc_info=True)
        return error_response(500, "Failed to initialize OAuth")

    logger.info(json.dumps({
        "action": "x_oauth_start",
        "user_id": user_id,
    }))
    return api_response(200, {"url": auth_url})
