#!/usr/bin/env python3
"""
Write a render state into the render-state table for manual polling.

Usage:
  python seed_render_state.py --render-id r_123 --progress 42.5
  python seed_render_state.py --render-id r_123 --done --url https://... --size 1048576
  python seed_render_state.py --render-id r_123 --done --storage-path user/renders/r_123.mp4 --size 1048576
  python seed_render_state.py --render-id r_123 --error "Remotion crashed"
"""

import argparse
import json
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lib.render_state import complete_render, fail_render, update_render_progress  # noqa: E402
from lib.storage import SIGNED_URL_EXPIRES_SECONDS, create_signed_download_url  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a render state in DynamoDB")
    parser.add_argument("--render-id", required=True)
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--progress", type=float)
    mode.add_argument("--done", action="store_true")
    mode.add_argument("--error")
    parser.add_argument("--url")
    parser.add_argument("--storage-path")
    parser.add_argument("--size", type=int, default=0)
    parser.add_argument("--table-name", default=os.environ.get("RENDER_STATE_TABLE_NAME"))
    args = parser.parse_args()

    if not args.table_name:
        raise ValueError("Missing table name. Use --table-name or RENDER_STATE_TABLE_NAME.")
    os.environ["RENDER_STATE_TABLE_NAME"] = args.table_name

    if args.done:
        if not args.url and not args.storage_path:
            raise ValueError("--done needs --url or --storage-path")
        storage_url = None
        if args.storage_path:
            storage_url = create_signed_download_url(args.storage_path, SIGNED_URL_EXPIRES_SECONDS)
        state = complete_render(
            args.render_id,
            args.url or storage_url,
            args.size,
            storage_url=storage_url,
            storage_path=args.storage_path,
        )
    elif args.error is not None:
        state = fail_render(args.render_id, args.error)
    else:
        state = update_render_progress(args.render_id, args.progress)

    print(json.dumps(state.model_dump(exclude_none=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
