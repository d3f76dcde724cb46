"""Render job state shared between the renderer and the API."""

import os
import time
from typing import Optional

from lib.dynamo import get_item, put_item
from lib.models import RenderState, RenderStatus

RENDER_STATE_SK = "state"
RENDER_STATE_TTL_SECONDS = 86400


def _table_name() -> Optional[str]:
    return os.environ.get("RENDER_STATE_TABLE_NAME")


def _pk(render_id: str) -> str:
    return f"render#{render_id}"


def get_render_state(render_id: str) -> Optional[RenderState]:
    item = get_item(_pk(render_id), RENDER_STATE_SK, table_name=_table_name())
    if not item:
        return None
    return RenderState.model_validate(item)


def save_render_state(render_id: str, state: RenderState) -> None:
    now_ms = int(time.time() * 1000)
    state.timestamp = now_ms
    item = {
        "pk": _pk(render_id),
        "sk": RENDER_STATE_SK,
        **state.model_dump(exclude_none=True),
        "ttl": now_ms // 1000 + RENDER_STATE_TTL_SECONDS,
    }
    put_item(item, table_name=_table_name())


def update_render_progress(render_id: str, progress: float) -> RenderState:
    state = get_render_state(render_id) or RenderState()
    state.status = RenderStatus.RENDERING.value
    state.progress = progress
    save_render_state(render_id, state)
    return state


def complete_render(
    render_id: str,
    url: str,
    size: int,
    storage_url: Optional[str] = None,
    storage_path: Optional[str] = None,
) -> RenderState:
    state = get_render_state(render_id) or RenderState()
    state.status = RenderStatus.DONE.value
    state.progress = 100
    state.url = url
    state.size = size
    if storage_url:
        state.storage_url = storage_url
    if storage_path:
        state.storage_path = storage_path
    save_render_state(render_id, state)
    return state


def fail_render(render_id: str, error: str) -> RenderState:
    state = get_render_state(render_id) or RenderState(progress=0)
    state.status = RenderStatus.ERROR.value
    state.error = error
    save_render_state(render_id, state)
    return state


def resolve_output_url(state: RenderState) -> tuple[Optional[str], bool]:
    """Pick the URL to hand to the client for a finished render.

    The persisted storage copy outlives the renderer's ephemeral output, so
    it wins whenever both exist. Returns (url, is_storage_url).
    """
    if state.storage_url:
        return state.storage_url, True
    return state.url, False
