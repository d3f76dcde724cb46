"""Session helpers.

API Gateway validates the Cognito session before the handler runs; handlers
only read the resolved claims from the request context.
"""

from typing import Optional


def _claims(event: dict) -> dict:
    request_context = event.get("requestContext") or {}
    authorizer = request_context.get("authorizer") or {}
    claims = authorizer.get("claims")
    if not claims:
        jwt_context = authorizer.get("jwt") or {}
        claims = jwt_context.get("claims") or {}
    return claims


def get_user_id(event: dict) -> str:
    """Extract user ID from the request event."""
    return _claims(event).get("sub", "")


def get_current_user(event: dict) -> Optional[str]:
    """Return the signed-in user's id, or None for anonymous requests."""
    return get_user_id(event) or None
