"""Redirect to the download of a finished render."""

import json
import logging

from lib.models import RenderStatus
from lib.render_state import get_render_state
from lib.response import error_response, redirect_response
from lib.storage import SIGNED_URL_EXPIRES_SECONDS, create_signed_download_url

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def handler(event, context):
    """
    Path parameters:
        - id: render id
    """
    path_params = event.get("pathParameters") or {}
    render_id = path_params.get("id")
    if not render_id:
        return error_response(400, "id is required in path parameters")

    logger.info(json.dumps({
        "action": "render_download",
        "render_id": render_id,
    }))

    try:
        state = get_render_state(render_id)
        if not state:
            return error_response(
                404,
                f"No render found with ID: {render_id}. The render may have expired. Please render again.",
            )

        if state.status != RenderStatus.DONE.value:
            return error_response(400, f"Render {render_id} is not completed yet. Status: {state.status}")

        if state.storage_path:
            location = create_signed_download_url(
                state.storage_path,
                SIGNED_URL_EXPIRES_SECONDS,
                filename=f"snip-video-{render_id}.mp4",
            )
            return redirect_response(location)

        if state.url:
            return redirect_response(state.url)

        return error_response(404, f"Video file not found for render {render_id}")
    except Exception:
        logger.error("Download endpoint error", exc_info=True)
        return error_response(500, "Failed to download video")
