"""Report the progress of a video render."""

import json
import logging
import os
import time

from lib.json_utils import parse_body
from lib.models import RenderStatus
from lib.render_state import get_render_state, resolve_output_url
from lib.response import api_response, error_response

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# The renderer may not have written its first state yet when the client
# starts polling, so a miss is retried after a short pause.
DEFAULT_LOOKUP_RETRIES = 1
DEFAULT_RETRY_DELAY_MS = 50


def _env_count(name: str, default: int) -> int:
    """Non-negative integer setting; malformed or negative values use the default."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={raw!r}")
        return default
    return value


def _lookup(render_id: str):
    retries = _env_count("RENDER_PROGRESS_RETRIES", DEFAULT_LOOKUP_RETRIES)
    delay_ms = _env_count("RENDER_PROGRESS_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS)

    state = get_render_state(render_id)
    for _ in range(retries):
        if state:
            break
        time.sleep(delay_ms / 1000)
        state = get_render_state(render_id)
    return state


def handler(event, context):
    try:
        body = parse_body(event)
    except ValueError:
        return error_response(400, "Invalid JSON in request body")

    render_id = body.get("renderId")
    if not render_id:
        return error_response(400, "No renderId provided")

    try:
        state = _lookup(render_id)

        if not state:
            logger.warning(json.dumps({
                "action": "render_progress_not_found",
                "render_id": render_id,
            }))
            return api_response(200, {
                "type": "error",
                "message": f"No render found with ID: {render_id}. The render may have expired. Please try again.",
            })

        if state.status == RenderStatus.ERROR.value:
            return api_response(200, {
                "type": "error",
                "message": state.error or "Unknown error occurred",
            })

        if state.status == RenderStatus.DONE.value:
            url, is_storage_url = resolve_output_url(state)
            return api_response(200, {
                "type": "done",
                "url": url,
                "size": state.size,
                "isSupabaseUrl": is_storage_url,
            })

        return api_response(200, {
            "type": "progress",
            "progress": state.progress or 0,
        })
    except Exception:
        logger.error("Progress endpoint error", exc_info=True)
        return error_response(500, "Failed to get render progress")
