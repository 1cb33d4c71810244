from .base import BaseEntity, PyObjectId, PyObjectIdStr

# Shared enums
from .enums import (
    IntegrationStatus,
    OrganizationSyncStatus,
    Provider,
    RepositorySyncStatus,
    SyncKind,
    SyncKindStatus,
)
from .integration import Integration
from .oauth_state import OAuthState
from .organization import Organization, OrganizationMember, OrganizationMetadata
from .repository import (
    Commit,
    DataCounts,
    Issue,
    Label,
    PullRequest,
    Repository,
    RepositoryOwner,
    SyncDetail,
    SyncDetails,
    UserRef,
)
from .timeline import (
    AssigneeEvent,
    CommentedEvent,
    GenericEvent,
    LabelEvent,
    TimelineEvent,
)

__all__ = [
    "BaseEntity",
    "PyObjectId",
    "PyObjectIdStr",
    "Integration",
    "OAuthState",
    "Organization",
    "OrganizationMember",
    "OrganizationMetadata",
    "Repository",
    "RepositoryOwner",
    "Commit",
    "PullRequest",
    "Issue",
    "Label",
    "UserRef",
    "DataCounts",
    "SyncDetail",
    "SyncDetails",
    # Timeline
    "TimelineEvent",
    "CommentedEvent",
    "LabelEvent",
    "AssigneeEvent",
    "GenericEvent",
    # Enums
    "Provider",
    "IntegrationStatus",
    "OrganizationSyncStatus",
    "RepositorySyncStatus",
    "SyncKind",
    "SyncKindStatus",
]
