"""Integration DTOs."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.entities.base import PyObjectIdStr


class GithubAuthUrlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    auth_url: str = Field(..., alias="authUrl")
    state: str


class IntegrationResponse(BaseModel):
    """Outward view of an integration; credentials are never included."""

    id: PyObjectIdStr = Field(..., alias="_id")
    user_id: str
    provider: str
    provider_user_id: str
    username: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None
    scope: Optional[str] = None
    connected_at: datetime
    last_synced_at: datetime
    status: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_entity(cls, integration: Any) -> "IntegrationResponse":
        return cls.model_validate(integration.model_dump(by_alias=True))


class IntegrationStatusResponse(BaseModel):
    success: bool = True
    connected: bool
    count: int
    message: Optional[str] = None
    integrations: List[IntegrationResponse]


class IntegrationListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[IntegrationResponse]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
