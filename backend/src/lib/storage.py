"""S3 object storage helpers for user video uploads and renders."""

import logging
import os
import re
import time
import uuid
from typing import Optional
from urllib.parse import parse_qs, urlparse

import boto3
import requests
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from lib.models import PresignedUpload

logger = logging.getLogger()
logger.setLevel(logging.INFO)

DEFAULT_BUCKET = "videos"
DEFAULT_UPLOAD_FOLDER = "transcribe"
SIGNED_UPLOAD_EXPIRES_SECONDS = 7200
SIGNED_URL_EXPIRES_SECONDS = 3600

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")

_client_cache = {}


class StorageError(ValueError):
    """Raised when the storage provider rejects or fails a request."""


def get_s3_client():
    """Get S3 client (cached). SigV4 so presigned URLs work in every region."""
    if "s3" not in _client_cache:
        _client_cache["s3"] = boto3.client("s3", config=Config(signature_version="s3v4"))
    return _client_cache["s3"]


def bucket_name() -> str:
    return os.environ.get("STORAGE_BUCKET_NAME") or DEFAULT_BUCKET


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_upload_path(filename: str, user_id: Optional[str], folder: str = DEFAULT_UPLOAD_FOLDER) -> str:
    """Object key for a browser upload.

    Anonymous uploads get a random per-request directory so two anonymous
    users uploading the same name in the same millisecond cannot collide.
    """
    timestamp = int(time.time() * 1000)
    safe_name = sanitize_filename(filename)
    if user_id:
        return f"{user_id}/{folder}/{timestamp}-{safe_name}"
    session_id = str(uuid.uuid4())
    return f"anonymous/{timestamp}-{session_id}/{safe_name}"


def create_signed_upload_url(storage_path: str, content_type: Optional[str] = None) -> PresignedUpload:
    """Presign a PUT for storage_path. The token is the URL's signature."""
    expires_in = int(os.environ.get("STORAGE_SIGNED_UPLOAD_EXPIRES_SECONDS") or SIGNED_UPLOAD_EXPIRES_SECONDS)
    params = {"Bucket": bucket_name(), "Key": storage_path}
    if content_type:
        params["ContentType"] = content_type

    try:
        upload_url = get_s3_client().generate_presigned_url(
            "put_object",
            Params=params,
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as exc:
        raise StorageError(str(exc)) from exc

    query = parse_qs(urlparse(upload_url).query)
    token = (query.get("X-Amz-Signature") or [""])[0]
    return PresignedUpload(storage_path=storage_path, upload_url=upload_url, token=token)


def create_signed_download_url(
    storage_path: str,
    expires_in: int = SIGNED_URL_EXPIRES_SECONDS,
    filename: Optional[str] = None,
) -> str:
    params = {"Bucket": bucket_name(), "Key": storage_path}
    if filename:
        params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'
    try:
        return get_s3_client().generate_presigned_url("get_object", Params=params, ExpiresIn=expires_in)
    except (BotoCoreError, ClientError) as exc:
        raise StorageError(str(exc)) from exc


def download_from_storage(storage_path: str) -> bytes:
    """Fetch an object's bytes by key."""
    try:
        response = get_s3_client().get_object(Bucket=bucket_name(), Key=storage_path)
        data = response["Body"].read()
    except (BotoCoreError, ClientError) as exc:
        raise StorageError(f"Failed to download from storage: {exc}") from exc

    if not data:
        raise StorageError("No data returned from storage")
    return data


def download_from_signed_url(signed_url: str) -> bytes:
    try:
        response = requests.get(signed_url, timeout=60)
    except requests.RequestException as exc:
        raise StorageError(f"Failed to download from signed URL: {exc}") from exc

    if not response.ok:
        raise StorageError(f"Failed to download from signed URL: {response.reason}")
    return response.content


def delete_from_storage(storage_path: str) -> bool:
    """Best-effort delete. Returns False instead of raising."""
    try:
        get_s3_client().delete_object(Bucket=bucket_name(), Key=storage_path)
    except (BotoCoreError, ClientError) as exc:
        logger.error(f"Failed to delete from storage: {exc}")
        return False
    return True


def upload_rendered_video(user_id: str, render_id: str, local_file_path: str) -> Optional[dict]:
    """Persist a finished render and return {path, signedUrl}, or None on failure."""
    storage_path = f"{user_id}/renders/{render_id}.mp4"
    client = get_s3_client()

    try:
        with open(local_file_path, "rb") as handle:
            client.put_object(
                Bucket=bucket_name(),
                Key=storage_path,
                Body=handle,
                ContentType="video/mp4",
            )
    except (OSError, BotoCoreError, ClientError):
        logger.exception("Rendered video upload failed")
        return None

    try:
        signed_url = create_signed_download_url(storage_path, SIGNED_URL_EXPIRES_SECONDS)
    except StorageError:
        logger.exception("Signed URL error")
        return None

    return {"path": storage_path, "signedUrl": signed_url}
