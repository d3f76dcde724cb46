"""API response utilities."""

import json

from lib.json_utils import json_serial


def api_response(status_code: int, body: dict, headers: dict = None):
    """Create an API Gateway response."""
    default_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type,Authorization",
        "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
    }
    if headers:
        default_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": default_headers,
        "body": json.dumps(body, default=json_serial),
    }


def error_response(status_code: int, message: str, details: str = None):
    """Create an error response."""
    body = {"error": message}
    if details:
        body["details"] = details
    return api_response(status_code, body)


def redirect_response(location: str, status_code: int = 302):
    """Create a redirect with an empty body."""
    return {
        "statusCode": status_code,
        "headers": {"Location": location, "Cache-Control": "no-store"},
        "body": "",
    }
