"""Issue a presigned URL for direct browser-to-storage uploads.

Large videos go straight to S3 instead of through the API Gateway payload
limit.
"""

import json
import logging

from lib.auth import get_current_user
from lib.json_utils import parse_body
from lib.response import api_response, error_response
from lib.storage import DEFAULT_UPLOAD_FOLDER, StorageError, build_upload_path, create_signed_upload_url

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def handler(event, context):
    try:
        body = parse_body(event)
    except ValueError:
        return error_response(400, "Invalid JSON in request body")

    filename = body.get("filename")
    if not filename:
        return error_response(400, "Filename is required")
    content_type = body.get("contentType")
    folder = body.get("folder") or DEFAULT_UPLOAD_FOLDER

    try:
        user_id = get_current_user(event)
        storage_path = build_upload_path(str(filename), user_id, folder)

        try:
            upload = create_signed_upload_url(storage_path, content_type)
        except StorageError as exc:
            logger.error(f"[presigned-url] Error creating signed URL: {exc}")
            return error_response(500, "Failed to create upload URL", details=str(exc))

        logger.info(json.dumps({
            "action": "presigned_url",
            "user_id": user_id,
            "storage_path": storage_path,
        }))
        return api_response(200, {
            "uploadUrl": upload.upload_url,
            "token": upload.token,
            "storagePath": upload.storage_path,
        })
    except Exception:
        logger.error("[presigned-url] Error", exc_info=True)
        return error_response(500, "Failed to generate upload URL")
