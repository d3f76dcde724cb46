"""Social connection storage helpers."""

import os
from datetime import datetime, timezone
from typing import Optional

from lib.dynamo import delete_item, get_item, put_item
from lib.models import SocialConnection


def _table_name() -> Optional[str]:
    return os.environ.get("SOCIAL_CONNECTIONS_TABLE_NAME")


def _key(user_id: str, provider: str) -> tuple[str, str]:
    return f"user#{user_id}", f"connection#{provider}"


def get_connection(user_id: str, provider: str) -> Optional[SocialConnection]:
    pk, sk = _key(user_id, provider)
    item = get_item(pk, sk, table_name=_table_name())
    if not item:
        return None
    return SocialConnection.model_validate(item)


def store_connection(user_id: str, provider: str, tokens: dict, profile: dict | None) -> SocialConnection:
    """Create or replace the user's connection for a provider."""
    now = datetime.now(timezone.utc)
    expires_at = None
    expires_in = tokens.get("expires_in")
    if expires_in:
        try:
            expires_at = datetime.fromtimestamp(now.timestamp() + int(expires_in), tz=timezone.utc)
        except (TypeError, ValueError):
            expires_at = None

    connection = SocialConnection(
        user_id=user_id,
        provider=provider,
        provider_user_id=(profile or {}).get("id"),
        provider_username=(profile or {}).get("username"),
        access_token=tokens.get("access_token"),
        refresh_token=tokens.get("refresh_token"),
        token_expires_at=expires_at,
        connected_at=now,
    )

    pk, sk = _key(user_id, provider)
    item = {"pk": pk, "sk": sk, **connection.model_dump(mode="json", exclude_none=True)}
    put_item(item, table_name=_table_name())
    return connection


def delete_connection(user_id: str, provider: str) -> None:
    """Remove the connection. No-op if it does not exist."""
    pk, sk = _key(user_id, provider)
    delete_item(pk, sk, table_name=_table_name())
