"""
Integration Entity - a user's connection to a code-hosting provider.

One document per (user_id, provider). The access token is stored here and
nowhere else; response DTOs never include it.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from app.entities.base import BaseEntity, utc_now
from app.entities.enums import IntegrationStatus, Provider


class Integration(BaseEntity):
    user_id: str
    provider: Provider = Provider.GITHUB
    provider_user_id: str
    username: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None

    # Credentials
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    scope: Optional[str] = None

    connected_at: datetime = Field(default_factory=utc_now)
    last_synced_at: datetime = Field(default_factory=utc_now)
    status: IntegrationStatus = IntegrationStatus.ACTIVE
    metadata: Dict[str, Any] = Field(default_factory=dict)
