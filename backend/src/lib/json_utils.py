"""JSON utilities."""

import base64
import json
from datetime import datetime
from decimal import Decimal


def json_serial(obj):
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    raise TypeError(f"Type {type(obj)} not serializable")


def parse_body(event: dict) -> dict:
    """Parse JSON body from API Gateway event.

    Raises json.JSONDecodeError on malformed input.
    """
    body = event.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, dict):
        return body
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    parsed = json.loads(body)
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("Expected a JSON object", body, 0)
    return parsed
