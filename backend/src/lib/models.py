"""Data models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class OAuthState(BaseModel):
    """Pending OAuth authorization attempt, one per (user, provider)."""
    user_id: str
    provider: str
    state: str = Field(description="CSRF token round-tripped through the provider")
    code_verifier: str = Field(description="PKCE secret, never sent to the client")
    created_at: datetime


class SocialConnection(BaseModel):
    """Linked social account, one per (user, provider)."""
    user_id: str
    provider: str
    provider_user_id: Optional[str] = None
    provider_username: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    connected_at: datetime


class RenderStatus(str, Enum):
    RENDERING = "rendering"
    DONE = "done"
    ERROR = "error"


class RenderState(BaseModel):
    """Progress record owned by the rendering pipeline."""
    status: str = RenderStatus.RENDERING.value
    progress: Optional[Union[int, float]] = None
    url: Optional[str] = Field(None, description="Ephemeral output URL")
    storage_url: Optional[str] = Field(None, description="Signed URL of the persisted copy")
    storage_path: Optional[str] = Field(None, description="Object key of the persisted copy")
    size: Optional[int] = None
    error: Optional[str] = None
    timestamp: Optional[int] = Field(None, description="Epoch millis of the last write")


class PresignedUpload(BaseModel):
    """Direct-to-storage upload grant. Not persisted."""
    storage_path: str
    upload_url: str
    token: str
