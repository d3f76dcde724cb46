"""Report or remove the caller's X connection."""

import json
import logging

from lib.auth import get_current_user
from lib.response import api_response, error_response
from lib.social_connections import delete_connection, get_connection
from lib.x_oauth import X_PROVIDER

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def _status(event):
    """Never fails: any problem reads as not connected."""
    try:
        user_id = get_current_user(event)
        if not user_id:
            return api_response(200, {"connected": False})

        connection = get_connection(user_id, X_PROVIDER)
        if connection:
            return api_response(200, {
                "connected": True,
                "username": connection.provider_username,
                "connectedAt": connection.connected_at,
            })
    except Exception:
        logger.error("X status check error", exc_info=True)

    return api_response(200, {"connected": False})


def _disconnect(event):
    user_id = get_current_user(event)
    if not user_id:
        return error_response(401, "Unauthorized")

    try:
        delete_connection(user_id, X_PROVIDER)
    except Exception:
        logger.error("X disconnect error", exc_info=True)
        return error_response(500, "Failed to disconnect")

    logger.info(json.dumps({
        "action": "x_disconnect",
        "user_id": user_id,
    }))
    return api_response(200, {"success": True})


def handler(event, context):
    http_context = (event.get("requestContext") or {}).get("http") or {}
    method = (event.get("httpMethod") or http_context.get("method") or "").upper()
    if method == "GET":
        return _status(event)
    if method == "DELETE":
        return _disconnect(event)
    return error_response(405, "Method not allowed")
