"""
Organization Entity - a mirrored GitHub organization (or personal account).

Unique per (user_id, login). Every sync overwrites the scalar fields and
replaces the member list wholesale.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.entities.base import BaseEntity, utc_now
from app.entities.enums import OrganizationSyncStatus


class OrganizationMember(BaseModel):
    login: str
    id: int
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    type: Optional[str] = None
    site_admin: Optional[bool] = None
    role: Optional[str] = None
    added_at: datetime = Field(default_factory=utc_now)


class OrganizationMetadata(BaseModel):
    company: Optional[str] = None
    blog: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    public_repos: Optional[int] = None
    public_gists: Optional[int] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Organization(BaseEntity):
    user_id: str
    github_id: int
    login: str
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    type: Optional[str] = None  # "Organization" or "User" for personal accounts

    metadata: OrganizationMetadata = Field(default_factory=OrganizationMetadata)
    members: List[OrganizationMember] = Field(default_factory=list)
    repository_count: int = 0

    last_synced_at: datetime = Field(default_factory=utc_now)
    sync_status: OrganizationSyncStatus = OrganizationSyncStatus.PENDING
    sync_error: Optional[str] = None
