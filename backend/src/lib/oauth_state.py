"""OAuth state helpers for PKCE authorization flows.

One pending attempt is kept per (user, provider). Starting a new attempt
overwrites the previous record, so only the latest state token and verifier
can complete the callback. A second item keyed by the state token maps the
callback, which arrives without a session, back to its user.
"""

import base64
import hashlib
import os
import secrets
from datetime import datetime, timezone
from typing import Optional

from lib.dynamo import delete_item, get_item, put_item
from lib.models import OAuthState

STATE_TTL_SECONDS = 600


def _table_name() -> Optional[str]:
    return os.environ.get("OAUTH_STATES_TABLE_NAME")


def _key(user_id: str, provider: str) -> tuple[str, str]:
    return f"user#{user_id}", f"oauth_state#{provider}"


def _state_key(state: str, provider: str) -> tuple[str, str]:
    return f"oauth_state#{state}", provider


def base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    """32 random bytes, base64url encoded (43 chars)."""
    return base64url(secrets.token_bytes(32))


def code_challenge_for(code_verifier: str) -> str:
    """S256 challenge: base64url(SHA-256(verifier))."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64url(digest)


def generate_state() -> str:
    return secrets.token_hex(16)


def create_oauth_state(user_id: str, provider: str) -> OAuthState:
    """Generate and store a fresh state/verifier pair for the user."""
    if not user_id:
        raise ValueError("user_id is required")
    if not provider:
        raise ValueError("provider is required")

    now = datetime.now(timezone.utc)
    oauth_state = OAuthState(
        user_id=user_id,
        provider=provider,
        state=generate_state(),
        code_verifier=generate_code_verifier(),
        created_at=now,
    )
    ttl = int(now.timestamp()) + STATE_TTL_SECONDS
    table_name = _table_name()

    pk, sk = _key(user_id, provider)
    previous = get_item(pk, sk, table_name=table_name)
    if previous and previous.get("state"):
        delete_item(*_state_key(previous["state"], provider), table_name=table_name)

    state_pk, state_sk = _state_key(oauth_state.state, provider)
    put_item(
        {
            "pk": state_pk,
            "sk": state_sk,
            "user_id": user_id,
            "provider": provider,
            "ttl": ttl,
        },
        table_name=table_name,
    )
    put_item(
        {
            "pk": pk,
            "sk": sk,
            "user_id": user_id,
            "provider": provider,
            "state": oauth_state.state,
            "code_verifier": oauth_state.code_verifier,
            "created_at": now.isoformat(),
            "ttl": ttl,
        },
        table_name=table_name,
    )
    return oauth_state


def get_oauth_state(user_id: str, provider: str, state: str) -> Optional[OAuthState]:
    """Return the user's pending attempt if its state token matches."""
    if not user_id or not provider or not state:
        return None
    pk, sk = _key(user_id, provider)
    item = get_item(pk, sk, table_name=_table_name())
    if not item:
        return None
    if not secrets.compare_digest(item.get("state", "").encode("utf-8"), state.encode("utf-8")):
        return None
    # DynamoDB TTL deletion lags, so expired items can still be read.
    if int(item.get("ttl") or 0) < int(datetime.now(timezone.utc).timestamp()):
        return None
    return OAuthState(
        user_id=item["user_id"],
        provider=item["provider"],
        state=item["state"],
        code_verifier=item["code_verifier"],
        created_at=item["created_at"],
    )


def find_oauth_state(provider: str, state: str) -> Optional[OAuthState]:
    """Resolve a callback's state token to the pending attempt that issued it."""
    if not provider or not state:
        return None
    index = get_item(*_state_key(state, provider), table_name=_table_name())
    if not index or not index.get("user_id"):
        return None
    return get_oauth_state(index["user_id"], provider, state)


def delete_oauth_state(user_id: str, provider: str) -> None:
    table_name = _table_name()
    pk, sk = _key(user_id, provider)
    item = get_item(pk, sk, table_name=table_name)
    if item and item.get("state"):
        delete_item(*_state_key(item["state"], provider), table_name=table_name)
    delete_item(pk, sk, table_name=table_name)
